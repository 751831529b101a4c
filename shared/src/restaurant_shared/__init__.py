"""Shared models and services for the restaurant payments backend."""
