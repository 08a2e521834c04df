# ruikit/window/__init__.py
