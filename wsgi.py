"""
WSGI Entry Point for Production Deployment

Gunicorn Configuration Example:
    gunicorn --bind 0.0.0.0:8000 --workers 4 wsgi:application
"""

import os

from app import create_app

application = create_app(os.environ.get('FLASK_CONFIG', 'production'))
app = application


if __name__ == '__main__':
    application.run(
        host=os.environ.get('HOST', '127.0.0.1'),
        port=int(os.environ.get('PORT', '5000')),
    )
