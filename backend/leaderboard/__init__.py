import random

import click
from flask import Flask, current_app, jsonify
from flask_cors import CORS
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from werkzeug.exceptions import HTTPException

from config import Config

# Objects returned by the service are serialized after the commit
db = SQLAlchemy(session_options={'expire_on_commit': False})
migrate = Migrate()
cors = CORS()


def get_leaderboard_service(app=None):
    """Build a service bound to the current app context's session."""
    from leaderboard.repository import SqlAlchemyLeaderboardStore
    from leaderboard.services import LeaderboardService

    app = app or current_app
    return LeaderboardService(
        SqlAlchemyLeaderboardStore(db.session),
        rng=app.extensions.get('leaderboard_rng'),
    )


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    cors.init_app(flask_app, origins=flask_app.config.get('CORS_ORIGINS', '*'))

    # One draw source per app; a fixed RANDOM_SEED makes claims reproducible
    flask_app.extensions['leaderboard_rng'] = random.Random(flask_app.config.get('RANDOM_SEED'))

    # Import and register blueprints here
    from leaderboard.main import main
    flask_app.register_blueprint(main)

    from leaderboard.api.leaderboard import leaderboard
    flask_app.register_blueprint(leaderboard)

    register_error_handlers(flask_app)
    register_commands(flask_app)

    if flask_app.config.get('SEED_ON_STARTUP'):
        with flask_app.app_context():
            # Ensure models are imported so tables are created
            from leaderboard import models  # noqa: F401
            db.create_all()
            try:
                get_leaderboard_service(flask_app).ensure_seeded()
            except Exception:
                flask_app.logger.exception("[seed] initial player seeding failed")
                raise

    return flask_app


def register_error_handlers(flask_app):
    from leaderboard.errors import LeaderboardError

    @flask_app.errorhandler(LeaderboardError)
    def handle_leaderboard_error(exc):
        if exc.status_code >= 500:
            flask_app.logger.error(f"[error] {type(exc).__name__}: {exc.message}", exc_info=exc.__cause__)
        return jsonify(exc.to_dict()), exc.status_code

    @flask_app.errorhandler(HTTPException)
    def handle_http_error(exc):
        return jsonify({'error': exc.description}), exc.code

    @flask_app.errorhandler(Exception)
    def handle_unexpected_error(exc):
        flask_app.logger.exception(f"[error] unhandled {type(exc).__name__}")
        return jsonify({'error': 'Internal server error'}), 500


def register_commands(flask_app):
    @flask_app.cli.command('seed')
    def seed_command():
        """Inserts the default players if there are none."""
        inserted = get_leaderboard_service().ensure_seeded()
        if inserted:
            click.echo(f'Inserted {inserted} default players.')
        else:
            click.echo('Players already present, nothing to seed.')

    @flask_app.cli.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from leaderboard import models  # noqa: F401
        db.drop_all()
        db.create_all()
        inserted = get_leaderboard_service().ensure_seeded()
        click.echo(f'Database has been reset and seeded with {inserted} players!')

