"""Flask application factory"""
import os
import click
from flask import Flask, jsonify
from menucraft.config import config
from menucraft.extensions import db, login_manager, csrf, limiter, talisman


def create_app(config_name=None):
    """Create and configure the Flask application"""
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config[config_name]())

    # Initialize extensions
    db.init_app(app)
    login_manager.init_app(app)
    csrf.init_app(app)
    limiter.init_app(app)

    # Security headers (production only)
    if app.config.get('TALISMAN_ENABLED'):
        talisman.init_app(app,
            content_security_policy={'default-src': "'self'"},
            force_https=True
        )

    @login_manager.user_loader
    def load_user(user_id):
        from menucraft.models import User
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'success': False, 'error': 'Please log in to access this page.'}), 401

    # Register blueprints
    from menucraft.blueprints.auth import bp as auth_bp
    from menucraft.blueprints.api import bp as api_bp
    from menucraft.blueprints.menus import bp as menus_bp
    from menucraft.blueprints.public import bp as public_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(api_bp, url_prefix='/api')
    app.register_blueprint(menus_bp, url_prefix='/api')
    app.register_blueprint(public_bp, url_prefix='/api')

    _register_commands(app)

    # Create database tables and run migrations
    with app.app_context():
        _initialize_database(app)

    return app


def _initialize_database(app):
    """Initialize database and run migrations"""
    from sqlalchemy import inspect, text
    from menucraft.models import User

    db.create_all()

    # Additive column migrations for databases created by older releases
    inspector = inspect(db.engine)
    columns = [col['name'] for col in inspector.get_columns('menu_items')]

    migrations = [
        ('embed_company_profile', 'ALTER TABLE menu_items ADD COLUMN embed_company_profile BOOLEAN DEFAULT 0'),
        ('show_dropdown', 'ALTER TABLE menu_items ADD COLUMN show_dropdown BOOLEAN DEFAULT 0'),
    ]

    for col_name, sql in migrations:
        if col_name not in columns:
            with db.engine.connect() as conn:
                conn.execute(text(sql))
                conn.commit()
            app.logger.info(f"Added column menu_items.{col_name}")

    # Create default admin user if no users exist
    if app.config.get('CREATE_DEFAULT_ADMIN') and User.query.count() == 0:
        admin_username = app.config['ADMIN_USERNAME']
        admin_password = app.config['ADMIN_PASSWORD']
        admin = User(username=admin_username, is_admin=True)
        admin.set_password(admin_password)
        db.session.add(admin)
        db.session.commit()
        app.logger.info(f"Created admin user: {admin_username}")
        if admin_password == 'admin':
            app.logger.warning("Using default password 'admin'. Set ADMIN_PASSWORD environment variable for security.")


def _register_commands(app):
    """Register flask CLI commands"""

    @app.cli.command('create-user')
    @click.argument('username')
    @click.password_option()
    def create_user(username, password):
        """Create a storefront owner account."""
        from menucraft.models import User
        from menucraft.utils.validators import validate_username, validate_password

        for is_valid, error in (validate_username(username), validate_password(password)):
            if not is_valid:
                raise click.ClickException(error)

        if User.query.filter_by(username=username).first():
            raise click.ClickException('Username already exists')

        user = User(username=username)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        click.echo(f'Created user "{username}"')
