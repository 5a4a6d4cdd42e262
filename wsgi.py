"""
WSGI entry point.

Point your WSGI server at ``wsgi:application``, e.g.

    gunicorn wsgi:application

Environment variables (GEMINI_API_KEY, THERAPIST_BOOKING_JSON, ...) must be
set before this module is imported; a project .env file is also read.
"""

from web_app import app as application

if __name__ == "__main__":
    application.run()
