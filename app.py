import os
from flask import Flask
from dotenv import load_dotenv
from models import db
from depreciation import RULES

# Load .env file (DATABASE_URL, API_KEY, ...)
load_dotenv()


def create_app(test_config=None):
    app = Flask(__name__, instance_relative_config=True)

    # Configuration
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')
    app.config['SQLALCHEMY_DATABASE_URI'] = os.environ.get(
        'DATABASE_URL', 'sqlite:///' + os.path.join(app.instance_path, 'depreciation.db'))
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['API_KEY'] = os.environ.get('API_KEY', '')
    app.config['MAX_SCHEDULE_PERIODS'] = int(os.environ.get('MAX_SCHEDULE_PERIODS', RULES['max_periods']))
    app.config['LOG_LEVEL'] = os.environ.get('LOG_LEVEL', 'INFO')
    if test_config:
        app.config.update(test_config)

    app.logger.setLevel(app.config['LOG_LEVEL'])

    # Ensure instance folder exists (default SQLite location)
    os.makedirs(app.instance_path, exist_ok=True)

    # Initialize extensions
    db.init_app(app)

    # Create tables
    with app.app_context():
        db.create_all()

    # Register blueprints
    from blueprints.api import api_bp
    app.register_blueprint(api_bp, url_prefix='/api')

    app.logger.info('Depreciation API initialised (database: %s, auth: %s).',
                    app.config['SQLALCHEMY_DATABASE_URI'].split(':', 1)[0],
                    'api key' if app.config['API_KEY'] else 'open')
    return app


if __name__ == '__main__':
    app = create_app()
    app.run(host='0.0.0.0', port=int(os.environ.get('PORT', 3000)), debug=False)
