import logging
from gridgenius import create_app

logging.basicConfig(
    level=logging.INFO,   # <-- allow INFO and above
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)

app = create_app()

if __name__ == "__main__":
    # bind to all interfaces so a browser on the host can reach the dev server
    app.run(host="0.0.0.0", port=5000, debug=True)
