# FILE IS USED TO FIND THE PROJECT ROOT, KEEP IT IN THE ROOT DIRECTORY
from pathlib import Path

p = Path(__file__).resolve()


def get_project_root() -> Path:
    """Directory holding this file; input/, output/, cache/ and logs/ hang off it."""
    return p.parent


if __name__ == '__main__':
    print(get_project_root())
