import os
import sys

# the modules live flat in bmp-huff/, make them importable without installing
SRC_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'bmp-huff'))
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)
