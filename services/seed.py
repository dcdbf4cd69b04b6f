"""Demo content for a fresh install (``flask seed``)."""
import logging

from models import db, Category, Link, GalleryImage, AboutContent, SiteConfig, HeroSlide

logger = logging.getLogger(__name__)

DEMO_CATEGORIES = [
    ("Design Inspiration", [
        {"title": "Awwwards", "url": "https://www.awwwards.com", "description": "Awards for the best in digital design, creativity and innovation."},
        {"title": "Behance", "url": "https://www.behance.net", "description": "Adobe's showcase for creative work from designers worldwide."},
        {"title": "Dribbble", "url": "https://dribbble.com", "description": "The social network where designers share small details of their work."},
    ]),
    ("Productivity Tools", [
        {"title": "Framer", "url": "https://www.framer.com", "description": "AI-assisted site design and building with rich motion."},
        {"title": "Figma", "url": "https://www.figma.com", "description": "The industry standard for collaborative design."},
        {"title": "Next.js", "url": "https://nextjs.org", "description": "The React framework balancing performance and experience."},
    ]),
]

DEMO_GALLERY = [
    ("https://images.unsplash.com/photo-1550684848-fac1c5b4e853?q=80&w=2070&auto=format&fit=crop", "Minimal Abstract 01"),
    ("https://images.unsplash.com/photo-1451187580459-43490279c0fa?q=80&w=2072&auto=format&fit=crop", "Digital Space 02"),
    ("https://images.unsplash.com/photo-1558591710-4b4a1ae0f04d?q=80&w=1974&auto=format&fit=crop", "Texture 03"),
    ("https://images.unsplash.com/photo-1618005182384-a83a8bd57fbe?q=80&w=1964&auto=format&fit=crop", "Flow 04"),
]

DEMO_ABOUT = {
    "title": "We believe digital space deserves the warmth of art and the depth of design.",
    "description": (
        "Artistic Nav is more than a collection of links. It is a carefully curated digital "
        "archive offering creative professionals a calm, pure and inspiring place to explore."
    ),
}

DEMO_CONFIG = {
    "contact_email": "hello@artistic-nav.com",
    "social_twitter": "Twitter",
    "social_instagram": "Instagram",
    "footer_copyright": "© 2026 Artistic Nav",
    "hero_title": "Where Inspiration Meets Design",
    "hero_subtitle": "A navigation experience beyond the ordinary. Explore refined design language and future interaction.",
}

DEMO_SLIDES = [
    {"title": "Curated", "subtitle": "Only the tools worth your time", "code_snippet": "links.filter(isWorthIt)"},
    {"title": "Ordered", "subtitle": "Arranged by hand, not by algorithm", "code_snippet": "categories.sort(byCurator)"},
]


def seed_demo_content():
    """Wipe site content and load the demo set. ``admin_password`` is kept."""
    Link.query.delete()
    Category.query.delete()
    GalleryImage.query.delete()
    AboutContent.query.delete()
    HeroSlide.query.delete()
    SiteConfig.query.filter(SiteConfig.key != "admin_password").delete()

    link_count = 0
    for position, (name, links) in enumerate(DEMO_CATEGORIES):
        category = Category(name=name, sort_order=position)
        db.session.add(category)
        for index, link in enumerate(links):
            category.links.append(Link(sort_order=index, clicks=0, **link))
            link_count += 1

    for url, title in DEMO_GALLERY:
        db.session.add(GalleryImage(url=url, title=title))
    db.session.add(AboutContent(**DEMO_ABOUT))
    for key, value in DEMO_CONFIG.items():
        db.session.add(SiteConfig(key=key, value=value))
    for position, slide in enumerate(DEMO_SLIDES):
        db.session.add(HeroSlide(sort_order=position, is_active=True, **slide))

    db.session.commit()
    counts = {
        "categories": len(DEMO_CATEGORIES),
        "links": link_count,
        "gallery images": len(DEMO_GALLERY),
        "hero slides": len(DEMO_SLIDES),
    }
    logger.info("Seeded demo content: %s", counts)
    return counts
