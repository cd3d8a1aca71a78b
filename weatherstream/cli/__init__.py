"""Command-line interface for weatherstream"""
