#!/usr/bin/env python3
"""
Run script for the hackerspace tool manager
"""

import argparse
import os
import sys

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from hackerspace import create_app
from hackerspace.build import build_database
from hackerspace.logger import get_logger

# Account passwords come from the environment.
# Run 'python generate_env.py' to create a .env file with secure values.

logger = get_logger("hackerspace.run")


def parse_arguments():
    parser = argparse.ArgumentParser(description='Hackerspace tool manager')
    parser.add_argument('--build-only', action='store_true',
                        help='Build database tables and essential accounts, then exit')
    parser.add_argument('--no-debug-data', action='store_false', dest='enable_debug_data',
                        help='Do not insert demo circles and tools')
    return parser.parse_args()


if __name__ == '__main__':
    args = parse_arguments()
    app = create_app()

    build_database(app, enable_debug_data=args.enable_debug_data and not args.build_only)

    if args.build_only:
        logger.info("Build completed. Exiting without starting web server.")
        sys.exit(0)

    debug_mode = os.environ.get('FLASK_DEBUG', 'False').lower() in ('true', '1', 'yes', 'on')
    use_reloader = os.environ.get('USE_RELOADER', 'False').lower() in ('true', '1', 'yes', 'on')
    host = os.environ.get('FLASK_HOST', '127.0.0.1')
    port = int(os.environ.get('FLASK_PORT', '5000'))

    if debug_mode:
        logger.warning("DEBUG MODE ENABLED - Do not use in production!")

    logger.info(f"Starting server on {host}:{port} (debug={debug_mode}, reloader={use_reloader})")
    app.run(debug=debug_mode, host=host, port=port, use_reloader=use_reloader)
