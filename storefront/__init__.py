"""Storefront: products and carts over REST, HTML views and WebSocket"""
