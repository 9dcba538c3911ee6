"""
Browser script execution for Script Runner.

Provides the Playwright-backed core of the service:
- Per-request browser sessions, launched locally or attached over CDP
- Execution of submitted scripts with the browser injected
- The /execute-script endpoint tying the two together
"""
