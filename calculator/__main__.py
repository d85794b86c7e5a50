"""``python -m calculator`` startet das Kommandozeilenwerkzeug."""

from .cli import main

if __name__ == "__main__":
    main()
