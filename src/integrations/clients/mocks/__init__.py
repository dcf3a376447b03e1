"""
Mock integration clients.

These clients return fake (but realistic) replies without calling any external API.
They are used when:
- No payment backend is configured
- We want to test the checkout lifecycle end-to-end without external dependencies

Important:
- Mock clients must follow the SAME interface as real HTTP clients.
- Mock clients should return data shaped according to src/integrations/contracts/*
"""
