"""Webhook configuration, message batching and delivery."""