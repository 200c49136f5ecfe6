"""Allow running as `python -m ignore_zipper`"""

from .cli import main

if __name__ == '__main__':
    main()
