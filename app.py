from flask import Flask, jsonify, request
import os
import logging
from datetime import datetime, timezone

import click

# Database and models
from models import db
from flask_migrate import Migrate

# Extensions
from flask_cors import CORS
from sqlalchemy import text
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from werkzeug.exceptions import HTTPException

# Services
from services import auth, content, site_config
from services.auth import admin_required
from services.errors import AppError, AuthenticationError, StoreUnavailableError, ValidationError

logging.basicConfig(
    level=os.environ.get('LOG_LEVEL', 'INFO').upper(),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)

app = Flask(__name__)
app.logger.setLevel(os.environ.get('LOG_LEVEL', 'INFO').upper())

cors_origins = [o.strip() for o in os.environ.get('CORS_ORIGINS', 'http://localhost:3000').split(',') if o.strip()]
CORS(app,
     resources={r"/api/*": {
         "origins": cors_origins,
         "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
         "allow_headers": ["Content-Type", "Authorization"]
     }},
     supports_credentials=True
)

# --- Database Configuration ---
uri = os.environ.get('DATABASE_URL')
if uri:
    if uri.startswith("postgres://"):
        uri = uri.replace("postgres://", "postgresql://", 1)
else:
    BASE_DIR = os.path.abspath(os.path.dirname(__file__))
    uri = f'sqlite:///{os.path.join(BASE_DIR, "artistic_nav.db")}'

app.config['SQLALCHEMY_DATABASE_URI'] = uri
app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

db.init_app(app)
migrate = Migrate(app, db)

# --- Admin Session Configuration ---
secret_key = os.environ.get('SECRET_KEY')
if not secret_key:
    app.logger.warning("SECRET_KEY not set. Admin sessions are signed with a development key.")
app.config['SECRET_KEY'] = secret_key or 'artistic-nav-development-key'
app.config['ADMIN_DEFAULT_PASSWORD'] = os.environ.get('ADMIN_DEFAULT_PASSWORD', site_config.DEFAULT_ADMIN_PASSWORD)
app.config['ADMIN_SESSION_HOURS'] = int(os.environ.get('ADMIN_SESSION_HOURS', auth.DEFAULT_SESSION_HOURS))
app.config['SESSION_COOKIE_SECURE'] = os.environ.get('SESSION_COOKIE_SECURE', '').lower() in ('1', 'true', 'yes')


# --- HELPER: REQUEST BODIES ---
def json_body(allowed=(dict,)):
    # force=True: the admin console posts JSON without a Content-Type header
    data = request.get_json(force=True, silent=True)
    if data is None or not isinstance(data, allowed):
        raise ValidationError("Malformed or missing JSON body")
    return data

def required_arg(name):
    value = request.args.get(name)
    if not value:
        raise ValidationError(f"Missing query parameter: {name}")
    return value

def success(**extra):
    return jsonify({"success": True, **extra})


# --- ERROR HANDLERS ---

@app.errorhandler(AppError)
def handle_app_error(exc):
    db.session.rollback()
    return jsonify(exc.to_dict()), exc.status_code

@app.errorhandler(OperationalError)
def handle_store_unavailable(exc):
    db.session.rollback()
    app.logger.error("Database unavailable on %s %s", request.method, request.path, exc_info=exc)
    error = StoreUnavailableError()
    return jsonify(error.to_dict()), error.status_code

@app.errorhandler(SQLAlchemyError)
def handle_store_error(exc):
    db.session.rollback()
    app.logger.error("Database error on %s %s", request.method, request.path, exc_info=exc)
    return jsonify({"success": False, "error": "An internal error occurred"}), 500

@app.errorhandler(HTTPException)
def handle_http_error(exc):
    return jsonify({"success": False, "error": exc.name}), exc.code


# --- API ROUTES ---

@app.route("/ping")
def ping():
    return "pong", 200

@app.route('/api/health', methods=['GET'])
def health():
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        db.session.execute(text('SELECT 1'))
    except SQLAlchemyError:
        db.session.rollback()
        app.logger.error("Health check could not reach the database", exc_info=True)
        return jsonify({"status": "unhealthy", "timestamp": timestamp, "database": "disconnected"}), 503
    return jsonify({"status": "healthy", "timestamp": timestamp, "database": "connected"}), 200


## AUTHENTICATION ROUTES ##

@app.route('/api/auth/login', methods=['POST'])
def login():
    data = json_body()
    try:
        token = auth.login(data.get('password'))
    except AuthenticationError:
        app.logger.warning("Failed admin login from %s", request.remote_addr)
        raise

    response = success(token=token)
    response.set_cookie(
        auth.SESSION_COOKIE,
        token,
        max_age=int(auth.session_lifetime().total_seconds()),
        httponly=True,
        secure=app.config['SESSION_COOKIE_SECURE'],
        samesite='Lax',
        path='/',
    )
    app.logger.info("Admin logged in from %s", request.remote_addr)
    return response

@app.route('/api/auth/logout', methods=['POST'])
def logout():
    response = success()
    response.delete_cookie(auth.SESSION_COOKIE, path='/')
    return response

@app.route('/api/auth/session', methods=['GET'])
def session_status():
    token = auth.token_from_request()
    issued_at = auth.read_session(token)
    if issued_at is None or not auth.verify_session(token):
        return jsonify({"authenticated": False, "expiresAt": None})
    expires_at = issued_at + auth.session_lifetime()
    return jsonify({"authenticated": True, "expiresAt": expires_at.isoformat()})

@app.route('/api/auth/password', methods=['PUT'])
@admin_required
def change_password():
    data = json_body()
    auth.change_password(data.get('oldPassword'), data.get('newPassword'))
    return success()


## CATEGORY ROUTES ##

@app.route('/api/categories', methods=['GET'])
def get_categories():
    return jsonify([category.to_dict() for category in content.list_categories()])

@app.route('/api/categories', methods=['POST'])
@admin_required
def create_category():
    category = content.create_category(json_body())
    return jsonify(category.to_dict()), 201

@app.route('/api/categories', methods=['PUT'])
@admin_required
def update_category():
    data = json_body((dict, list))
    # An array body is the full desired order of all categories
    if isinstance(data, list):
        return success(order=content.reorder_categories(data))
    return jsonify(content.update_category(data).to_dict())

@app.route('/api/categories/reorder', methods=['PUT'])
@admin_required
def reorder_categories():
    data = json_body((dict, list))
    items = data if isinstance(data, list) else data.get('ids')
    return success(order=content.reorder_categories(items))

@app.route('/api/categories', methods=['DELETE'])
@admin_required
def delete_category():
    content.delete_category(required_arg('id'))
    return success()


## LINK ROUTES ##

@app.route('/api/links', methods=['GET'])
def get_links():
    links = content.list_links(request.args.get('categoryId') or None)
    return jsonify([link.to_dict() for link in links])

@app.route('/api/links', methods=['POST'])
@admin_required
def create_link():
    link = content.create_link(json_body())
    return jsonify(link.to_dict()), 201

@app.route('/api/links', methods=['PUT'])
@admin_required
def update_link():
    data = json_body((dict, list))
    # An array body is the full desired order of one category's links
    if isinstance(data, list):
        return success(order=content.reorder_links(data))
    return jsonify(content.update_link(data).to_dict())

@app.route('/api/links/reorder', methods=['PUT'])
@admin_required
def reorder_links():
    data = json_body((dict, list))
    if isinstance(data, list):
        return success(order=content.reorder_links(data))
    return success(order=content.reorder_links(data.get('ids'), data.get('categoryId')))

@app.route('/api/links', methods=['DELETE'])
@admin_required
def delete_link():
    content.delete_link(required_arg('id'))
    return success()

@app.route('/api/links/click', methods=['POST'])
def click_link():
    # Fire-and-forget from the public pages: never an error, whatever the body
    data = request.get_json(force=True, silent=True)
    link_id = data.get('id') if isinstance(data, dict) else None
    counted = content.record_click(link_id)
    return success(counted=counted)

@app.route('/api/links/featured', methods=['GET'])
def get_featured_links():
    return jsonify([link.to_dict() for link in site_config.resolve_featured_links()])


## GALLERY ROUTES ##

@app.route('/api/gallery', methods=['GET'])
def get_gallery():
    return jsonify([image.to_dict() for image in content.list_gallery()])

@app.route('/api/gallery', methods=['POST'])
@admin_required
def add_gallery_image():
    image = content.create_gallery_image(json_body())
    return jsonify(image.to_dict()), 201

@app.route('/api/gallery', methods=['PUT'])
@admin_required
def update_gallery_image():
    return jsonify(content.update_gallery_image(json_body()).to_dict())

@app.route('/api/gallery', methods=['DELETE'])
@admin_required
def delete_gallery_image():
    content.delete_gallery_image(required_arg('id'))
    return success()


## ABOUT ROUTES ##

@app.route('/api/about', methods=['GET'])
def get_about():
    about = content.current_about()
    return jsonify(about.to_dict() if about else None)

@app.route('/api/about', methods=['POST'])
@admin_required
def create_about():
    about = content.create_about(json_body())
    return jsonify(about.to_dict()), 201

@app.route('/api/about', methods=['PUT'])
@admin_required
def update_about():
    return jsonify(content.save_about(json_body()).to_dict())


## HERO SLIDE ROUTES ##

@app.route('/api/hero', methods=['GET'])
def get_hero_slides():
    active_only = request.args.get('active', '').lower() in ('1', 'true', 'yes')
    return jsonify([slide.to_dict() for slide in content.list_hero_slides(active_only=active_only)])

@app.route('/api/hero', methods=['POST'])
@admin_required
def create_hero_slide():
    slide = content.create_hero_slide(json_body())
    return jsonify(slide.to_dict()), 201

@app.route('/api/hero', methods=['PUT'])
@admin_required
def update_hero_slide():
    data = json_body((dict, list))
    # An array body is the full desired order of all slides
    if isinstance(data, list):
        return success(order=content.reorder_hero_slides(data))
    return jsonify(content.update_hero_slide(data).to_dict())

@app.route('/api/hero/reorder', methods=['PUT'])
@admin_required
def reorder_hero_slides():
    data = json_body((dict, list))
    items = data if isinstance(data, list) else data.get('ids')
    return success(order=content.reorder_hero_slides(items))

@app.route('/api/hero', methods=['DELETE'])
@admin_required
def delete_hero_slide():
    content.delete_hero_slide(required_arg('id'))
    return success()


## SITE CONFIG ROUTES ##

@app.route('/api/config', methods=['GET'])
@admin_required
def get_config():
    return jsonify([setting.to_dict() for setting in content.list_configs()])

@app.route('/api/config', methods=['PUT'])
@admin_required
def update_config():
    data = json_body()
    updated, failed = content.upsert_configs(data.get('configs'))
    return jsonify({"success": not failed, "updated": updated, "failed": failed})

@app.route('/api/config', methods=['DELETE'])
@admin_required
def delete_config():
    content.delete_config(required_arg('key'))
    return success()

@app.route('/api/site', methods=['GET'])
def get_site():
    config_map = site_config.load_config_map()
    featured = site_config.resolve_featured_links(config_map=config_map)
    return jsonify({
        "config": site_config.public_config(config_map),
        "featuredLinks": [link.to_dict() for link in featured],
    })


## CLI ##

@app.cli.command('init-db')
def init_db_command():
    """Create all tables without running migrations."""
    db.create_all()
    click.echo("Database tables created.")

@app.cli.command('seed')
def seed_command():
    """Replace the site's content with the demo data set."""
    from services.seed import seed_demo_content
    counts = seed_demo_content()
    click.echo("Seeded " + ", ".join(f"{count} {name}" for name, count in counts.items()))


if __name__ == '__main__':
    app.run(debug=os.environ.get('FLASK_DEBUG') == '1')
