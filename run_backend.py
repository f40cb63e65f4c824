# run_backend.py
# Script to launch the Flask backend for the Movie Fan service
# ------------------------------------------------------------
# This script sets up the environment and runs the Flask development server.
# It ensures the correct working directory and environment variables are set for Flask.

import os
import subprocess
import sys
import logging

# Configure basic logging for the runner script itself
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

if __name__ == '__main__':
    logging.info("--- Starting Flask Backend ---")

    # Run from the project root so 'moviefan' is importable and the default
    # SQLite file lands next to the code.
    current_script_dir = os.path.dirname(os.path.abspath(__file__))
    os.chdir(current_script_dir)
    logging.info(f"Changed working directory to: {os.getcwd()}")

    # Flask discovers the create_app() factory in this module.
    os.environ['FLASK_APP'] = 'moviefan.main'
    # Debug mode reloads on code changes; never enable it in production.
    os.environ.setdefault('FLASK_DEBUG', '1')

    port = os.getenv('PORT', '5001')
    flask_cmd = [sys.executable, '-m', 'flask', 'run', '--host', '0.0.0.0', '--port', port]

    logging.info(f"Executing Flask command: {' '.join(flask_cmd)}")

    try:
        subprocess.run(flask_cmd)
    except KeyboardInterrupt:
        logging.info("\nFlask backend stopped by user (KeyboardInterrupt).")
    except FileNotFoundError:
        logging.error("Error: Command not found. Ensure Python and Flask are installed and in your PATH.")
        logging.error(f"Attempted command: {' '.join(flask_cmd)}")
