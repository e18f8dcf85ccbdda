# app/__init__.py
"""
Marks API: marcas (like, favorite, bookmark y reacciones) sobre posts.
"""
