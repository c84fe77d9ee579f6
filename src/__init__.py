"""Merged pull request feed generator"""
