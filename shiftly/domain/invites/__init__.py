"""Invites domain - setup tokens, invitation email and account setup"""
