from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

# --- Import Models ---
from .Category import Category
from .Link import Link
from .GalleryImage import GalleryImage
from .AboutContent import AboutContent
from .SiteConfig import SiteConfig
from .HeroSlide import HeroSlide
