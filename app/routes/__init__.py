"""Routes package for the community events backend."""


def register_routes(app):
    """Register all route blueprints with the application."""
    from .announcements import announcements_bp
    from .translate import translate_bp

    app.register_blueprint(translate_bp, url_prefix='/translate')
    app.register_blueprint(announcements_bp, url_prefix='/api/announcements')
