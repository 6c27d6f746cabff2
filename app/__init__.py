from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
import logging
import os
from dotenv import load_dotenv

load_dotenv()

db = SQLAlchemy()


def _database_url(config_name):
    if config_name == 'testing':
        return 'sqlite://'
    url = os.getenv(
        'DATABASE_URL',
        'sqlite:///community_events.db'  # SQLite for local development
    )
    # Some hosts still hand out postgres:// URLs
    if url.startswith('postgres://'):
        url = url.replace('postgres://', 'postgresql://', 1)
    return url


def create_app(config_name='development', translation_service=None):
    app = Flask(__name__)

    logging.basicConfig(level=os.getenv('LOG_LEVEL', 'INFO').upper())

    # Config
    app.config['SQLALCHEMY_DATABASE_URI'] = _database_url(config_name)
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['TESTING'] = config_name == 'testing'
    app.config['OPENAI_API_KEY'] = '' if config_name == 'testing' else os.getenv('OPENAI_API_KEY', '')
    app.config['OPENAI_MODEL'] = os.getenv('OPENAI_MODEL', 'gpt-4o')
    app.config['OPENAI_TEMPERATURE'] = float(os.getenv('OPENAI_TEMPERATURE', 0.1))
    app.config['OPENAI_TIMEOUT'] = float(os.getenv('OPENAI_TIMEOUT', 30))

    # Initialize extensions
    db.init_app(app)
    CORS(app)

    from app.models import TranslationCache
    from app.services.translation import TranslationService
    from app.services.translator import OpenAITranslator

    # One service per process, shared by every request handler
    if translation_service is None:
        translator = OpenAITranslator(
            api_key=app.config['OPENAI_API_KEY'],
            model=app.config['OPENAI_MODEL'],
            temperature=app.config['OPENAI_TEMPERATURE'],
            timeout=app.config['OPENAI_TIMEOUT'],
        )
        translation_service = TranslationService(translator, store=TranslationCache)
    app.extensions['translation'] = translation_service

    if not translation_service.enabled:
        app.logger.warning(
            "OPENAI_API_KEY not set - translation will pass texts through unchanged"
        )

    # Create tables with error handling
    with app.app_context():
        try:
            db.create_all()
        except Exception as e:
            app.logger.warning(f"Could not create database tables: {e}")

    # Register routes
    from app.routes import register_routes
    register_routes(app)

    # Health check
    @app.route('/health', methods=['GET'])
    def health():
        return {'status': 'ok'}, 200

    return app
