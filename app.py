"""
Lavish Website Back-office
Application Entry Point

This file serves as the entry point for the Flask application.
It uses the application factory pattern defined in the lavish package.
"""

import os

from lavish import create_app
from lavish.config import Config, DevelopmentConfig

config_class = DevelopmentConfig if os.environ.get('FLASK_ENV') == 'development' else Config

# Create the Flask application using the factory
app = create_app(config_class)

if __name__ == '__main__':
    app.run(debug=app.config.get('DEBUG', False), host='0.0.0.0', port=5000)
