"""Matchmaking backend: queue, pairing engine and HTTP API.

Build the Flask app with app.main.create_app().
"""
