import os


def _env_flag(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///leaderboard.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Port used by run.py when serving directly
    PORT = int(os.environ.get('PORT', '3001'))
    # Comma separated list of allowed origins, '*' allows any
    CORS_ORIGINS = [o.strip() for o in os.environ.get('CORS_ORIGINS', '*').split(',') if o.strip()]
    # Create tables and insert the default players on first startup
    SEED_ON_STARTUP = _env_flag('SEED_ON_STARTUP', True)
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Optional: fixed seed for the points draw. Unset uses OS entropy.
    RANDOM_SEED = int(os.environ['RANDOM_SEED']) if os.environ.get('RANDOM_SEED') else None
