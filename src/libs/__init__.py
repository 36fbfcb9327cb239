"""
Library modules for the prediction server.
"""
