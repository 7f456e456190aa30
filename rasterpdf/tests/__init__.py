"""Tests for the rasterpdf package"""
