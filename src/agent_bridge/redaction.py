"""Secret redaction applied to every piece of session text before output.

The rules run in a fixed order. Vendor key prefixes go first, then bearer
headers, JWTs, PEM blocks and datastore URIs, and the generic
``key=value`` rule runs last so it only ever sees what the narrower rules
left behind. The placeholder strings are part of the output contract.
"""

import re
from collections.abc import Callable

Replacement = str | Callable[[re.Match[str]], str]

REDACTED = "[REDACTED]"


def _assignment(match: re.Match[str]) -> str:
    return f"{match.group(1)}={REDACTED}"


REDACTION_RULES: list[tuple[str, re.Pattern[str], Replacement]] = [
    # OpenAI-style keys (sk-proj-, sk-ant-, sk-...)
    ("openai_key", re.compile(r"\bsk-[A-Za-z0-9_-]{20,}"), "sk-[REDACTED]"),
    ("aws_access_key", re.compile(r"\bAKIA[0-9A-Z]{16}\b"), "AKIA[REDACTED]"),
    (
        "github_token",
        re.compile(r"\b(ghp_|gho_|ghs_|ghr_)[A-Za-z0-9_]{20,}"),
        r"\1[REDACTED]",
    ),
    ("github_pat", re.compile(r"\bgithub_pat_[A-Za-z0-9_]{20,}"), "github_pat_[REDACTED]"),
    ("google_api_key", re.compile(r"\bAIza[A-Za-z0-9_-]{20,}"), "AIza[REDACTED]"),
    ("slack_token", re.compile(r"\b(xoxb-|xoxp-|xoxs-)[A-Za-z0-9-]{10,}"), r"\1[REDACTED]"),
    (
        "bearer",
        re.compile(r"\bBearer\s+[A-Za-z0-9._-]{10,}", re.IGNORECASE),
        "Bearer [REDACTED]",
    ),
    (
        "jwt",
        re.compile(r"\beyJ[A-Za-z0-9_-]{10,}\.[A-Za-z0-9_-]{10,}\.[A-Za-z0-9_-]{10,}"),
        "[REDACTED_JWT]",
    ),
    (
        "pem_private_key",
        re.compile(
            r"-----BEGIN\s+(?:RSA |EC |DSA |OPENSSH )?PRIVATE KEY-----"
            r"[\s\S]*?"
            r"-----END\s+(?:RSA |EC |DSA |OPENSSH )?PRIVATE KEY-----"
        ),
        "[REDACTED_PEM_KEY]",
    ),
    # Only the userinfo part; scheme and host stay readable.
    (
        "connection_string",
        re.compile(
            r"\b((?:postgres(?:ql)?|mysql|mongodb(?:\+srv)?|rediss?|amqps?)://)[^\s/@\"']+@",
            re.IGNORECASE,
        ),
        r"\1[REDACTED]@",
    ),
    (
        "secret_assignment",
        re.compile(
            r"\b(api[_-]?key|token|secret|password)\b[\"']?\s*[:=]\s*"
            r"(?:\"[^\"\n]*\"|'[^'\n]*'|\S)\S*",
            re.IGNORECASE,
        ),
        _assignment,
    ),
]


def redact_sensitive_text(text: str | None) -> str:
    """Mask suspected secrets in ``text``.

    Pure and idempotent: ``redact_sensitive_text(redact_sensitive_text(x))``
    equals ``redact_sensitive_text(x)``.
    """
    output = text or ""
    for _name, pattern, replacement in REDACTION_RULES:
        output = pattern.sub(replacement, output)
    return output
