"""Candidate version models and resolution."""
