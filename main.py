# main.py

# Convenience launcher so the viewer can be started from a source checkout
# with `python main.py gui` or `python main.py cli list`.
from code_viewer.main import main

if __name__ == '__main__':
    main()
