"""Pharmacy directory backend."""
