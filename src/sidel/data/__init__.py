# sidel/data/__init__.py
# Bundled manifest and language definitions (package data).
