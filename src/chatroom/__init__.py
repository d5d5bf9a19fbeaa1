"""Minimal polling chat room backend."""
