"""Pricing: static payment-instruction wizard."""
