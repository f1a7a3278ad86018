"""
Built-in language definitions.

Each language is an ordered list of rules: when two rules match at the
same position the earlier one wins, so specific rules (definitions,
comments, strings) come before general ones (keywords, names).
"""

from __future__ import annotations

import re

from codecolor.core.models import Language, Rule
from codecolor.core.scopes import ScopeName as S


# =============================================================================
# Helper Languages
# =============================================================================

PLAIN_TEXT = Language(
    id="plaintext",
    name="Plain Text",
    aliases=["text", "txt"],
    file_extensions=[".txt", ".text", ".log"],
)

COMMENT_BODY = Language(
    id="comment",
    name="Comment Body",
    rules=[
        Rule(r'\b(?:TODO|FIXME|XXX|HACK|NOTE)\b', S.COMMENT_TODO),
    ],
)

STRING_ESCAPES = Language(
    id="string-escapes",
    name="String Escapes",
    rules=[
        Rule(r'\\(?:x[0-9a-fA-F]{2}|u[0-9a-fA-F]{4}|N\{[^}\n]+\}|[0-7]{1,3}|.)', S.STRING_ESCAPE,
             flags=re.DOTALL),
    ],
)


def _block_comment(start: str, end: str, scope: str = S.COMMENT_BLOCK) -> Rule:
    """A comment region that runs until ``end`` (or the end of input)."""
    return Rule(start, scope, nested_language="comment", end_pattern=end, nested_scope=scope)


# =============================================================================
# Python
# =============================================================================

PYTHON_KEYWORDS = (
    r'\b(?:and|as|assert|async|await|break|continue|del|elif|else|'
    r'except|finally|for|from|global|if|import|in|is|lambda|nonlocal|not|'
    r'or|pass|raise|return|try|while|with|yield|match|case)\b'
)

PYTHON_CONSTANTS = r'\b(?:True|False|None|Ellipsis|NotImplemented)\b'

PYTHON_BUILTINS = (
    r'\b(?:abs|all|any|ascii|bin|bool|breakpoint|bytearray|bytes|callable|'
    r'chr|classmethod|compile|complex|delattr|dict|dir|divmod|enumerate|'
    r'eval|exec|filter|float|format|frozenset|getattr|globals|hasattr|'
    r'hash|help|hex|id|input|int|isinstance|issubclass|iter|len|list|'
    r'locals|map|max|memoryview|min|next|object|oct|open|ord|pow|print|'
    r'property|range|repr|reversed|round|set|setattr|slice|sorted|'
    r'staticmethod|str|sum|super|tuple|type|vars|zip|__import__)\b'
)

PYTHON = Language(
    id="python",
    name="Python",
    aliases=["py", "python3"],
    file_extensions=[".py", ".pyw", ".pyi"],
    first_line_pattern=r'^#!.*\bpython[0-9.]*\b',
    rules=[
        Rule(r'#.*', S.COMMENT_LINE),

        # Triple-quoted strings may span lines
        Rule(r'[fFrRbBuU]{0,2}"""', S.STRING_QUOTED_TRIPLE, nested_language="string-escapes",
             end_pattern=r'"""', nested_scope=S.STRING_QUOTED_TRIPLE),
        Rule(r"[fFrRbBuU]{0,2}'''", S.STRING_QUOTED_TRIPLE, nested_language="string-escapes",
             end_pattern=r"'''", nested_scope=S.STRING_QUOTED_TRIPLE),

        Rule(r'[fFrRbBuU]{0,2}"(?:[^"\\\n]|\\.)*"', S.STRING_QUOTED_DOUBLE),
        Rule(r"[fFrRbBuU]{0,2}'(?:[^'\\\n]|\\.)*'", S.STRING_QUOTED_SINGLE),

        Rule(r'^(\s*)(@[\w.]+)', {2: S.DECORATOR}),

        Rule(r'\b0[xX][0-9a-fA-F_]+\b', S.NUMBER_HEX),
        Rule(r'\b0[oO][0-7_]+\b', S.NUMBER_OCTAL),
        Rule(r'\b0[bB][01_]+\b', S.NUMBER_BINARY),
        Rule(r'\b\d[\d_]*\.\d*(?:[eE][+-]?\d+)?[jJ]?|\b\d[\d_]*[eE][+-]?\d+[jJ]?', S.NUMBER_FLOAT),
        Rule(r'\b\d[\d_]*[jJ]?\b', S.NUMBER),

        Rule(r'\b(def)(\s+)(\w+)', {1: S.KEYWORD_DECLARATION, 3: S.FUNCTION}),
        Rule(r'\b(class)(\s+)(\w+)', {1: S.KEYWORD_DECLARATION, 3: S.CLASS}),

        Rule(PYTHON_KEYWORDS, S.KEYWORD),
        Rule(PYTHON_CONSTANTS, S.KEYWORD_CONSTANT),
        Rule(PYTHON_BUILTINS, S.FUNCTION_BUILTIN),

        Rule(r'\b(?:self|cls)\b', S.VARIABLE_SPECIAL),
        Rule(r'\b__\w+__\b', S.VARIABLE_SPECIAL),

        Rule(r'\b(\w+)(?=\s*\()', {1: S.FUNCTION}),
        Rule(r'->|\*\*=?|//=?|[-+*/%@&|^~<>!=]=?', S.OPERATOR),
    ],
)


# =============================================================================
# JavaScript
# =============================================================================

JAVASCRIPT_KEYWORDS = (
    r'\b(?:async|await|break|case|catch|const|continue|debugger|default|'
    r'delete|do|else|export|extends|finally|for|if|import|in|'
    r'instanceof|let|new|of|return|static|super|switch|throw|try|'
    r'typeof|var|void|while|with|yield|enum|implements|interface|package|'
    r'private|protected|public|abstract|as|declare|from|get|'
    r'module|namespace|set|type|readonly|keyof|infer)\b'
)

JAVASCRIPT_CONSTANTS = r'\b(?:true|false|null|undefined|NaN|Infinity)\b'

JAVASCRIPT_TYPES = (
    r'\b(?:any|boolean|never|number|object|string|symbol|unknown|'
    r'bigint|Array|Boolean|Date|Error|Function|Map|Number|Object|Promise|'
    r'RegExp|Set|String|Symbol|WeakMap|WeakSet)\b'
)

JAVASCRIPT_TEMPLATE = Language(
    id="javascript-template",
    name="JavaScript Template Literal",
    rules=[
        Rule(r'\\.', S.STRING_ESCAPE, flags=re.DOTALL),
        Rule(r'\$\{', S.STRING_INTERPOLATION, nested_language="javascript",
             end_pattern=r'\}'),
    ],
)

JAVASCRIPT = Language(
    id="javascript",
    name="JavaScript",
    aliases=["js", "typescript", "ts", "jsx", "tsx"],
    file_extensions=[".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs"],
    first_line_pattern=r'^#!.*\b(?:node|deno)\b',
    rules=[
        Rule(r'//.*', S.COMMENT_LINE),
        _block_comment(r'/\*\*(?!/)', r'\*/', S.COMMENT_DOC),
        _block_comment(r'/\*', r'\*/'),

        Rule(r'`', S.STRING_TEMPLATE, nested_language="javascript-template",
             end_pattern=r'`', nested_scope=S.STRING_TEMPLATE),
        Rule(r'"(?:[^"\\\n]|\\.)*"', S.STRING_QUOTED_DOUBLE),
        Rule(r"'(?:[^'\\\n]|\\.)*'", S.STRING_QUOTED_SINGLE),

        # A slash after an operator or opening bracket starts a regex literal
        Rule(r'(?<=[=(,:;!&|?{}\[])(\s*)(/(?![/*])(?:[^\\/\n]|\\.)+/[dgimsuvy]*)',
             {2: S.STRING_REGEX}),

        Rule(r'\b0[xX][0-9a-fA-F_]+n?\b', S.NUMBER_HEX),
        Rule(r'\b0[oO][0-7_]+n?\b', S.NUMBER_OCTAL),
        Rule(r'\b0[bB][01_]+n?\b', S.NUMBER_BINARY),
        Rule(r'\b\d[\d_]*(?:\.\d*)?(?:[eE][+-]?\d+)?n?\b', S.NUMBER),

        Rule(r'\b(function)(\s*\*?\s*)(\w+)', {1: S.KEYWORD_DECLARATION, 3: S.FUNCTION}),
        Rule(r'\b(class)(\s+)(\w+)', {1: S.KEYWORD_DECLARATION, 3: S.CLASS}),
        Rule(r'\b(?:function|class)\b', S.KEYWORD_DECLARATION),

        Rule(JAVASCRIPT_KEYWORDS, S.KEYWORD),
        Rule(JAVASCRIPT_CONSTANTS, S.KEYWORD_CONSTANT),
        Rule(JAVASCRIPT_TYPES, S.KEYWORD_TYPE),

        Rule(r'@\w+', S.DECORATOR),
        Rule(r'\bthis\b', S.VARIABLE_SPECIAL),
        Rule(r'\b([A-Za-z_$][\w$]*)(?=\s*\()', {1: S.FUNCTION}),
        Rule(r'=>|[-+*/%&|^~<>!=?]=?', S.OPERATOR),
        Rule(r'[{}()\[\]]', S.BRACKET),
    ],
)


# =============================================================================
# CSS
# =============================================================================

CSS_UNITS = (
    r'(?:px|em|rem|%|vh|vw|vmin|vmax|ch|ex|cm|mm|in|pt|pc|deg|rad|grad|'
    r'turn|s|ms|Hz|kHz|dpi|dpcm|dppx|fr)?'
)

CSS_BLOCK = Language(
    id="css-block",
    name="CSS Declarations",
    rules=[
        _block_comment(r'/\*', r'\*/'),
        Rule(r'"(?:[^"\\\n]|\\.)*"', S.STRING_QUOTED_DOUBLE),
        Rule(r"'(?:[^'\\\n]|\\.)*'", S.STRING_QUOTED_SINGLE),
        Rule(r'(url)(\()([^)]*)(\))', {1: S.FUNCTION_BUILTIN, 3: S.STRING}),
        Rule(r'(--[\w-]+)(\s*)(:)', {1: S.VARIABLE, 3: S.DELIMITER}),
        Rule(r'([\w-]+)(\s*)(:)(?!:)', {1: S.CSS_PROPERTY, 3: S.DELIMITER}),
        Rule(r'#[0-9a-fA-F]{3,8}\b', S.NUMBER_HEX),
        Rule(r'-?\b\d+(?:\.\d+)?%|-?(?:\b\d+\.?\d*|\.\d+)' + CSS_UNITS + r'\b', S.NUMBER),
        Rule(r'!important\b', S.KEYWORD),
        Rule(r'\b([\w-]+)(?=\()', {1: S.FUNCTION_BUILTIN}),
        Rule(r'--[\w-]+|\$[\w-]+', S.VARIABLE),
        # nested rule sets (SCSS, CSS nesting)
        Rule(r'\{', S.BRACKET, nested_language="css-block", end_pattern=r'\}'),
        Rule(r'[\w-]+', S.CSS_VALUE),
        Rule(r'[;,]', S.DELIMITER),
    ],
)

CSS = Language(
    id="css",
    name="CSS",
    aliases=["scss", "less"],
    file_extensions=[".css", ".scss", ".less"],
    rules=[
        _block_comment(r'/\*', r'\*/'),
        Rule(r'//.*', S.COMMENT_LINE),
        Rule(r'@[\w-]+', S.KEYWORD),
        Rule(r'"(?:[^"\\\n]|\\.)*"', S.STRING_QUOTED_DOUBLE),
        Rule(r"'(?:[^'\\\n]|\\.)*'", S.STRING_QUOTED_SINGLE),
        Rule(r'\{', S.BRACKET, nested_language="css-block", end_pattern=r'\}'),
        Rule(r'::?[\w-]+', S.KEYWORD),
        Rule(r'\[[^\]\n]*\]', S.HTML_ATTRIBUTE),
        Rule(r'[.#]?[\w-]+|\*', S.CSS_SELECTOR),
    ],
)


# =============================================================================
# HTML
# =============================================================================

HTML_TAG = Language(
    id="html-tag",
    name="HTML Tag",
    rules=[
        Rule(r'"[^"]*"', S.HTML_ATTRIBUTE_VALUE),
        Rule(r"'[^']*'", S.HTML_ATTRIBUTE_VALUE),
        Rule(r'(?<==)[^\s"\'=<>`]+', S.HTML_ATTRIBUTE_VALUE),
        Rule(r'[^\s"\'>/=]+', S.HTML_ATTRIBUTE),
        Rule(r'=', S.OPERATOR),
    ],
)

HTML = Language(
    id="html",
    name="HTML",
    aliases=["htm", "xhtml", "xml", "svg"],
    file_extensions=[".html", ".htm", ".xhtml", ".xml", ".svg"],
    first_line_pattern=r'(?i)^\s*<(?:!DOCTYPE\s+html|html\b|\?xml\b)',
    rules=[
        Rule(r'<!--', S.HTML_COMMENT, nested_language="comment", end_pattern=r'-->',
             nested_scope=S.HTML_COMMENT),
        Rule(r'<!\[CDATA\[[\s\S]*?\]\]>', S.STRING),
        Rule(r'<![^>]*>', S.HTML_DOCTYPE),
        Rule(r'<\?[\s\S]*?\?>', S.PREPROCESSOR),

        # Embedded languages
        Rule(r'(<)(script)\b([^>]*)(>)',
             {1: S.HTML_TAG_DELIMITER, 2: S.HTML_TAG, 4: S.HTML_TAG_DELIMITER},
             nested_language="javascript", end_pattern=r'(</)(script)(\s*>)',
             end_captures={1: S.HTML_TAG_DELIMITER, 2: S.HTML_TAG, 3: S.HTML_TAG_DELIMITER},
             flags=re.IGNORECASE),
        Rule(r'(<)(style)\b([^>]*)(>)',
             {1: S.HTML_TAG_DELIMITER, 2: S.HTML_TAG, 4: S.HTML_TAG_DELIMITER},
             nested_language="css", end_pattern=r'(</)(style)(\s*>)',
             end_captures={1: S.HTML_TAG_DELIMITER, 2: S.HTML_TAG, 3: S.HTML_TAG_DELIMITER},
             flags=re.IGNORECASE),

        Rule(r'(</?)([\w:.-]+)', {1: S.HTML_TAG_DELIMITER, 2: S.HTML_TAG},
             nested_language="html-tag", end_pattern=r'/?>',
             end_captures=S.HTML_TAG_DELIMITER),
        Rule(r'&(?:#\d+|#[xX][0-9a-fA-F]+|\w+);', S.HTML_ENTITY),
    ],
)


# =============================================================================
# JSON
# =============================================================================

JSON = Language(
    id="json",
    name="JSON",
    aliases=["jsonc", "json5"],
    file_extensions=[".json", ".jsonc", ".json5"],
    rules=[
        Rule(r'//.*', S.COMMENT_LINE),
        _block_comment(r'/\*', r'\*/'),
        Rule(r'("(?:[^"\\\n]|\\.)*")(\s*)(:)', {1: S.JSON_KEY, 3: S.DELIMITER}),
        Rule(r'"(?:[^"\\\n]|\\.)*"', S.STRING_QUOTED_DOUBLE),
        Rule(r'-?\b\d+(?:\.\d+)?(?:[eE][+-]?\d+)?\b', S.NUMBER),
        Rule(r'\b(?:true|false|null)\b', S.KEYWORD_CONSTANT),
        Rule(r'[{}\[\]]', S.BRACKET),
        Rule(r'[,:]', S.DELIMITER),
    ],
)


# =============================================================================
# SQL
# =============================================================================

SQL_KEYWORDS = (
    r'\b(?:SELECT|FROM|WHERE|AND|OR|NOT|IN|BETWEEN|LIKE|IS|NULL|AS|'
    r'JOIN|INNER|LEFT|RIGHT|OUTER|FULL|CROSS|ON|UNION|ALL|DISTINCT|'
    r'INSERT|INTO|VALUES|UPDATE|SET|DELETE|CREATE|TABLE|VIEW|INDEX|'
    r'DROP|ALTER|ADD|COLUMN|PRIMARY|KEY|FOREIGN|REFERENCES|CONSTRAINT|'
    r'UNIQUE|CHECK|DEFAULT|AUTO_INCREMENT|CASCADE|ORDER|BY|ASC|DESC|'
    r'GROUP|HAVING|LIMIT|OFFSET|TOP|CASE|WHEN|THEN|ELSE|END|EXISTS|'
    r'GRANT|REVOKE|COMMIT|ROLLBACK|TRANSACTION|BEGIN|DECLARE|CURSOR|'
    r'FETCH|OPEN|CLOSE|PROCEDURE|FUNCTION|TRIGGER|DATABASE|SCHEMA|'
    r'IF|WHILE|LOOP|FOR|RETURN|RETURNS|TEMPORARY|TEMP|WITH|RECURSIVE)\b'
)

SQL_TYPES = (
    r'\b(?:INT|INTEGER|SMALLINT|BIGINT|DECIMAL|NUMERIC|FLOAT|REAL|DOUBLE|'
    r'CHAR|VARCHAR|TEXT|NCHAR|NVARCHAR|NTEXT|BINARY|VARBINARY|BLOB|'
    r'DATE|TIME|DATETIME|TIMESTAMP|YEAR|BOOLEAN|BOOL|BIT|SERIAL|'
    r'JSON|XML|UUID|ARRAY|MONEY|INTERVAL)\b'
)

SQL_FUNCTIONS = (
    r'\b(?:COUNT|SUM|AVG|MIN|MAX|COALESCE|NULLIF|CAST|CONVERT|'
    r'UPPER|LOWER|TRIM|LTRIM|RTRIM|SUBSTRING|REPLACE|CONCAT|'
    r'LENGTH|LEN|ROUND|FLOOR|CEIL|ABS|NOW|GETDATE|CURRENT_DATE|'
    r'CURRENT_TIME|CURRENT_TIMESTAMP|EXTRACT|DATEPART|DATEDIFF)\b'
)

SQL = Language(
    id="sql",
    name="SQL",
    aliases=["mysql", "postgresql", "sqlite", "tsql"],
    file_extensions=[".sql"],
    rules=[
        Rule(r'--.*', S.COMMENT_LINE),
        _block_comment(r'/\*', r'\*/'),
        Rule(r"'(?:[^']|'')*'", S.STRING_QUOTED_SINGLE),
        Rule(r'"[^"]*"|`[^`]*`|\[[^\]\n]*\]', S.VARIABLE),
        Rule(r'\b\d+(?:\.\d+)?\b', S.NUMBER),
        Rule(SQL_KEYWORDS, S.KEYWORD, flags=re.IGNORECASE),
        Rule(SQL_TYPES, S.KEYWORD_TYPE, flags=re.IGNORECASE),
        Rule(SQL_FUNCTIONS, S.FUNCTION_BUILTIN, flags=re.IGNORECASE),
        Rule(r'@\w+|:\w+|\$\d+|\?', S.VARIABLE),
        Rule(r'[<>=!]+|\|\|', S.OPERATOR),
    ],
)


# =============================================================================
# C/C++
# =============================================================================

CPP_KEYWORDS = (
    r'\b(?:alignas|alignof|and|and_eq|asm|auto|bitand|bitor|break|case|'
    r'catch|compl|concept|const|consteval|constexpr|constinit|'
    r'const_cast|continue|co_await|co_return|co_yield|decltype|default|'
    r'delete|do|dynamic_cast|else|enum|explicit|export|extern|final|for|'
    r'friend|goto|if|inline|mutable|namespace|new|noexcept|not|not_eq|'
    r'operator|or|or_eq|override|private|protected|public|'
    r'register|reinterpret_cast|requires|return|sizeof|static|'
    r'static_assert|static_cast|switch|template|thread_local|'
    r'throw|try|typedef|typeid|typename|union|using|virtual|volatile|'
    r'while|xor|xor_eq)\b'
)

CPP_TYPES = (
    r'\b(?:bool|char|char8_t|char16_t|char32_t|double|float|int|long|short|'
    r'signed|unsigned|void|wchar_t|int8_t|int16_t|int32_t|int64_t|'
    r'uint8_t|uint16_t|uint32_t|uint64_t|size_t|ptrdiff_t|nullptr_t)\b'
)

CPP_CONSTANTS = r'\b(?:true|false|NULL|nullptr|EOF)\b'

CPP = Language(
    id="cpp",
    name="C/C++",
    aliases=["c", "c++", "cxx", "h"],
    file_extensions=[".c", ".h", ".cpp", ".hpp", ".cc", ".cxx", ".hxx", ".c++", ".h++"],
    rules=[
        Rule(r'^(\s*)(#\s*include)(\s*)([<"][^>"\n]+[>"])',
             {2: S.PREPROCESSOR, 4: S.STRING}),
        Rule(r'^\s*#\s*\w+', S.PREPROCESSOR),
        Rule(r'//.*', S.COMMENT_LINE),
        _block_comment(r'/\*', r'\*/'),
        Rule(r'R"([^(\s]*)\([\s\S]*?\)\1"', S.STRING),
        Rule(r'"(?:[^"\\\n]|\\.)*"', S.STRING_QUOTED_DOUBLE),
        Rule(r"'(?:[^'\\\n]|\\.)+'", S.STRING_QUOTED_SINGLE),
        Rule(r"\b0[xX][0-9a-fA-F']+[uUlL]*\b", S.NUMBER_HEX),
        Rule(r"\b0[bB][01']+[uUlL]*\b", S.NUMBER_BINARY),
        Rule(r"\b\d[\d']*\.\d*(?:[eE][+-]?\d+)?[fFlL]?|\b\d[\d']*[eE][+-]?\d+[fFlL]?", S.NUMBER_FLOAT),
        Rule(r"\b\d[\d']*[uUlL]*\b", S.NUMBER),
        Rule(r'\b(class|struct)(\s+)(\w+)', {1: S.KEYWORD_DECLARATION, 3: S.CLASS}),
        Rule(r'\b(namespace)(\s+)(\w+)', {1: S.KEYWORD_DECLARATION, 3: S.CLASS}),
        Rule(r'\b(?:class|struct)\b', S.KEYWORD_DECLARATION),
        Rule(CPP_KEYWORDS, S.KEYWORD),
        Rule(CPP_TYPES, S.KEYWORD_TYPE),
        Rule(CPP_CONSTANTS, S.KEYWORD_CONSTANT),
        Rule(r'\bthis\b', S.VARIABLE_SPECIAL),
        Rule(r'\b[A-Z][A-Z0-9_]+\b', S.CONSTANT),
        Rule(r'\b(\w+)(?=\s*\()', {1: S.FUNCTION}),
    ],
)


# =============================================================================
# Markdown
# =============================================================================

def _fenced(info: str, language_id: str) -> Rule:
    """A fenced code block whose info string names ``language_id``."""
    return Rule(
        r'^(```)(' + info + r')[ \t]*$',
        {1: S.DELIMITER, 2: S.KEYWORD},
        nested_language=language_id,
        end_pattern=r'^```[ \t]*$',
        end_captures=S.DELIMITER,
        flags=re.IGNORECASE,
    )


MARKDOWN = Language(
    id="markdown",
    name="Markdown",
    aliases=["md"],
    file_extensions=[".md", ".markdown", ".mdown", ".mkd"],
    rules=[
        _fenced(r'python|py', "python"),
        _fenced(r'javascript|js|typescript|ts', "javascript"),
        _fenced(r'css', "css"),
        _fenced(r'html|xml', "html"),
        _fenced(r'json', "json"),
        _fenced(r'sql', "sql"),
        _fenced(r'c|cpp|c\+\+', "cpp"),
        Rule(r'^```.*\n[\s\S]*?^```[ \t]*$', S.STRING),
        Rule(r'^#{1,6}[ \t].*', S.KEYWORD),
        Rule(r'^[ \t]*(?:[-*+]|\d+\.)(?=[ \t])', S.DELIMITER),
        Rule(r'^>.*', S.COMMENT),
        Rule(r'`[^`\n]+`', S.STRING),
        Rule(r'\*\*[^*\n]+\*\*|__[^_\n]+__', S.KEYWORD),
        Rule(r'\*[^*\n]+\*|\b_[^_\n]+_\b', S.VARIABLE),
        Rule(r'(!?\[)([^\]\n]*)(\]\()([^)\n]*)(\))',
             {2: S.STRING, 4: S.HTML_ATTRIBUTE_VALUE}),
    ],
)


BUILTIN_LANGUAGES = (
    PLAIN_TEXT,
    PYTHON,
    JAVASCRIPT,
    CSS,
    HTML,
    JSON,
    SQL,
    CPP,
    MARKDOWN,
)

# Languages only ever entered through another language's nested rules
SUPPORT_LANGUAGES = (
    COMMENT_BODY,
    STRING_ESCAPES,
    JAVASCRIPT_TEMPLATE,
    CSS_BLOCK,
    HTML_TAG,
)
