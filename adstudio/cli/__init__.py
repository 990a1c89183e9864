"""
AdStudio CLI
"""
