"""Allow `python -m guestbook`."""

from guestbook.main import run

if __name__ == "__main__":
    run()
