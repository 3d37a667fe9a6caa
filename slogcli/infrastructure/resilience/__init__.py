"""API Resilience Implementations.

Rate-limit tracking from response headers and the request executor that
waits out exhausted windows and retries HTTP 429 responses.
Bounded Context: API Resilience
"""
