"""Pressroom: a headless CMS backend for static-site content."""
