"""Generative AI services: vocabulary extraction and quiz question generation."""
