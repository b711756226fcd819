"""
main.py

Flask + Socket.IO server for the UTransfer file relay.

Dependencies:
  - Python packages: Flask, flask-restx, flask-cors, Flask-SocketIO, aiohttp

Notes:
  - Files live in UPLOAD_DIR for FILE_TTL_SECONDS (10 minutes by default)
  - Swagger docs at /docs, health check at /health
"""

import logging

from utransfer.app_factory import create_app, shutdown, start_background_tasks
from utransfer.config.settings import AppConfig

config = AppConfig()

logging.basicConfig(
    level=config.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app = create_app(config)

if __name__ == "__main__":
    start_background_tasks(app)
    try:
        if app.socketio is not None:
            app.socketio.run(
                app,
                host=config.host,
                port=config.port,
                debug=config.debug,
                use_reloader=False,
                allow_unsafe_werkzeug=True,
            )
        else:
            app.run(host=config.host, port=config.port, debug=config.debug, use_reloader=False)
    finally:
        shutdown(app)
