# sidel/utils/__init__.py
