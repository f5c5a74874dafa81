"""Fixed table of textual vulnerability detectors."""
import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import FrozenSet, Pattern, Tuple

from repo_analyzer.models.models import Severity

CODE_EXTENSIONS: FrozenSet[str] = frozenset({
    ".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs",
    ".py", ".rb", ".php", ".java", ".go", ".rs",
    ".vue", ".svelte",
})


def is_code_file(path: str) -> bool:
    """Shared predicate for which files are scanned or sent for review."""
    return PurePosixPath(path).suffix.lower() in CODE_EXTENSIONS


@dataclass(frozen=True)
class Rule:
    id: str
    category: str
    severity: Severity
    pattern: Pattern[str]
    title: str
    description: str
    remediation: str


_I = re.IGNORECASE
_USER_INPUT = r"(\$\{|req\.|request\.|params\.)"

RULES: Tuple[Rule, ...] = (
    # Hardcoded secrets
    Rule(
        "hardcoded-api-key", "Hardcoded Secret", "critical",
        re.compile(r"""(api[_-]?key|apikey)\s*[:=]\s*['"][a-zA-Z0-9_\-]{20,}['"]""", _I),
        "Hardcoded API Key",
        "API key appears to be hardcoded in source code",
        "Move API keys to environment variables",
    ),
    Rule(
        "hardcoded-secret", "Hardcoded Secret", "critical",
        re.compile(r"""(secret|password|passwd|pwd)\s*[:=]\s*['"][^'"]{8,}['"]""", _I),
        "Hardcoded Secret/Password",
        "Secret or password appears to be hardcoded",
        "Use environment variables or a secrets manager",
    ),
    Rule(
        "aws-key", "Hardcoded Secret", "critical",
        re.compile(r"AKIA[0-9A-Z]{16}"),
        "AWS Access Key",
        "AWS access key ID found in source code",
        "Remove and rotate the AWS key immediately",
    ),
    Rule(
        "private-key", "Hardcoded Secret", "critical",
        re.compile(r"-----BEGIN (RSA |EC |DSA |OPENSSH )?PRIVATE KEY-----"),
        "Private Key Exposed",
        "Private key found in source code",
        "Remove private key and store securely outside repo",
    ),
    Rule(
        "jwt-secret", "Hardcoded Secret", "high",
        re.compile(r"""(jwt[_-]?secret|token[_-]?secret)\s*[:=]\s*['"][^'"]+['"]""", _I),
        "Hardcoded JWT Secret",
        "JWT signing secret is hardcoded",
        "Move to environment variables",
    ),
    # Injection
    Rule(
        "sql-injection", "SQL Injection", "high",
        re.compile(r"(\$\{|\+\s*)\s*(req\.|request\.|params\.|query\.|body\.)[^}]+\}?\s*(\+|`)"),
        "Potential SQL Injection",
        "User input may be directly concatenated into SQL query",
        "Use parameterized queries or prepared statements",
    ),
    Rule(
        "raw-query", "SQL Injection", "medium",
        re.compile(r"""\.raw\s*\(\s*['"`]"""),
        "Raw SQL Query",
        "Raw SQL queries may be vulnerable to injection",
        "Prefer ORM methods or use parameterized queries",
    ),
    Rule(
        "exec-injection", "Command Injection", "critical",
        re.compile(r"(exec|execSync|spawn|spawnSync|os\.system|os\.popen)\s*\([^)]*" + _USER_INPUT),
        "Command Injection Risk",
        "User input may be passed to shell command",
        "Sanitize input and avoid shell execution with user data",
    ),
    Rule(
        "eval-usage", "Code Injection", "critical",
        re.compile(r"\beval\s*\([^)]+\)"),
        "eval() Usage",
        "eval() can execute arbitrary code",
        "Avoid eval(); use safer alternatives like JSON.parse()",
    ),
    # XSS
    Rule(
        "innerhtml", "XSS", "high",
        re.compile(r"\.innerHTML\s*=\s*[^;]+"),
        "innerHTML Assignment",
        "Direct innerHTML assignment may enable XSS",
        "Use textContent or sanitize HTML before insertion",
    ),
    Rule(
        "dangerously-set-html", "XSS", "high",
        re.compile(r"dangerouslySetInnerHTML"),
        "dangerouslySetInnerHTML Usage",
        "React's dangerouslySetInnerHTML bypasses XSS protection",
        "Sanitize content with DOMPurify before rendering",
    ),
    Rule(
        "document-write", "XSS", "high",
        re.compile(r"document\.write\s*\("),
        "document.write Usage",
        "document.write can introduce XSS vulnerabilities",
        "Use DOM manipulation methods instead",
    ),
    # Path traversal
    Rule(
        "path-traversal", "Path Traversal", "high",
        re.compile(r"(readFile|readFileSync|writeFile|writeFileSync|\bopen)\s*\([^)]*" + _USER_INPUT),
        "Path Traversal Risk",
        "User input in file path may allow directory traversal",
        "Validate and sanitize file paths; resolve them against an allowed root",
    ),
    # Misconfiguration
    Rule(
        "cors-wildcard", "Misconfiguration", "medium",
        re.compile(r"""cors\s*\(\s*\{\s*origin\s*:\s*['"]?\*['"]?|allow_origins\s*=\s*\[\s*['"]\*['"]""", _I),
        "CORS Wildcard Origin",
        "CORS allows requests from any origin",
        "Restrict to specific trusted origins",
    ),
    Rule(
        "https-disabled", "Misconfiguration", "medium",
        re.compile(r"https?\s*:\s*false|secure\s*:\s*false|verify\s*=\s*false", _I),
        "HTTPS/Secure Disabled",
        "Security feature appears to be disabled",
        "Enable HTTPS and secure flags in production",
    ),
    Rule(
        "debug-enabled", "Misconfiguration", "low",
        re.compile(r"""debug\s*[:=]\s*true|DEBUG\s*=\s*['"]?true""", _I),
        "Debug Mode Enabled",
        "Debug mode should be disabled in production",
        "Use environment-based configuration",
    ),
    # Weak cryptography
    Rule(
        "md5-usage", "Weak Cryptography", "medium",
        re.compile(r"""createHash\s*\(\s*['"]md5['"]\s*\)|hashlib\.md5\s*\(""", _I),
        "MD5 Hash Usage",
        "MD5 is cryptographically broken",
        "Use SHA-256 or stronger hashing algorithms",
    ),
    Rule(
        "sha1-usage", "Weak Cryptography", "low",
        re.compile(r"""createHash\s*\(\s*['"]sha1['"]\s*\)|hashlib\.sha1\s*\(""", _I),
        "SHA1 Hash Usage",
        "SHA1 is considered weak for security purposes",
        "Use SHA-256 or stronger algorithms",
    ),
    # Authentication
    Rule(
        "no-auth-check", "Authentication", "medium",
        re.compile(r"(//|#)\s*TODO:?\s*(add|implement)?\s*auth", _I),
        "Missing Authentication",
        "TODO comment suggests authentication not implemented",
        "Implement proper authentication before deployment",
    ),
)
