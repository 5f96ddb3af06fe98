"""Chat domain - rooms, encrypted messages and unread counts"""
