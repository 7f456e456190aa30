"""Unit tests for rasterpdf, no browser required"""
