"""
Real HTTP integration clients.

These clients communicate with the real payment backend via HTTP:
- POST {base}/stkpush/ to send the PIN prompt
- GET {base}/check-status/{checkout_request_id}/ to poll the outcome

Important:
- Must implement the same interface as the mock clients (StkPushGateway)
- Must return data shaped according to src/integrations/contracts/*

Switching:
The selection of mock vs real clients happens in src/api/endpoints/checkout.py only.
"""
