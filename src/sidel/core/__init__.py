# sidel/core/__init__.py
