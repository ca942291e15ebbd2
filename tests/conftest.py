import os
import sys

# Top-level modules (builder, devserver, firesync) live at the repo root
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
