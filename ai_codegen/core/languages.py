"""
Language identifiers known to the generator.
"""

SUPPORTED_LANGUAGES = [
    "Java", "Python", "JavaScript", "TypeScript", "C++", "C#", "Go",
    "Rust", "Kotlin", "Swift", "PHP", "Ruby", "Scala", "R", "SQL",
    "HTML", "CSS", "React", "Angular", "Vue", "Node.js", "Spring Boot",
]

# Tags models put after an opening code fence, lowercased
LANGUAGE_TAGS = frozenset(
    [language.lower() for language in SUPPORTED_LANGUAGES] + [
        "py", "python3", "js", "jsx", "ts", "tsx", "cpp", "c", "cs", "csharp",
        "golang", "rs", "kt", "rb", "sh", "bash", "shell", "zsh", "json",
        "yaml", "yml", "xml", "dart", "lua", "perl", "haskell", "elixir",
        "objective-c", "objc", "powershell", "plaintext", "text", "code",
    ]
)


def is_language_tag(line: str) -> bool:
    """Check whether a line is nothing but a language identifier."""
    return line.strip().lower() in LANGUAGE_TAGS
