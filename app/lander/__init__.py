"""Lander: a home page listing Docker containers routed through Traefik."""

__version__ = "0.3.0"
