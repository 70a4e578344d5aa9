"""
Tests for dangerous-pattern compilation and the danger detector.
"""

import unittest

from clai.core.configs import SafetyConfig
from clai.core.errors import ConfigError
from clai.safety.detector import is_dangerous, matching_pattern
from clai.safety.patterns import (
    DEFAULT_DANGEROUS_PATTERNS,
    DangerousPatternSet,
    PatternCompileError,
    compile_dangerous_patterns,
)


class TestPatternCompilation(unittest.TestCase):

    def test_eight_defaults_compile(self):
        self.assertEqual(len(DEFAULT_DANGEROUS_PATTERNS), 8)
        self.assertEqual(len(compile_dangerous_patterns(DEFAULT_DANGEROUS_PATTERNS)), 8)

    def test_invalid_pattern_reports_index(self):
        with self.assertRaises(PatternCompileError) as ctx:
            compile_dangerous_patterns([r"ok", r"([unclosed"])
        self.assertEqual(ctx.exception.index, 1)
        self.assertIsInstance(ctx.exception, ConfigError)

    def test_empty_config_uses_defaults(self):
        patterns = DangerousPatternSet.from_config(SafetyConfig())
        self.assertEqual(patterns.sources, DEFAULT_DANGEROUS_PATTERNS)
        self.assertTrue(patterns.ok)

    def test_config_patterns_replace_defaults(self):
        patterns = DangerousPatternSet.from_config(SafetyConfig(dangerous_patterns=[r"shutdown"]))
        self.assertEqual(patterns.sources, ("shutdown",))

    def test_compilation_is_repeatable(self):
        first = [r.pattern for r in compile_dangerous_patterns(DEFAULT_DANGEROUS_PATTERNS)]
        second = [r.pattern for r in compile_dangerous_patterns(DEFAULT_DANGEROUS_PATTERNS)]
        self.assertEqual(first, second)


class TestDangerDetector(unittest.TestCase):

    def setUp(self):
        self.patterns = DangerousPatternSet.defaults()

    def test_dangerous_commands(self):
        for command in [
            "rm -rf /",
            "sudo rm -rf /",
            "dd if=/dev/zero of=/dev/sda",
            "mkfs.ext4 /dev/sdb1",
            "echo x > /dev/sda",
            "format c:",
            "del /f /s c:\\",
        ]:
            self.assertTrue(is_dangerous(command, self.patterns), command)

    def test_safe_commands(self):
        for command in ["ls -la", "cd /tmp", "echo hello", "git status", "rm -rf ./build", "", "   "]:
            self.assertFalse(is_dangerous(command, self.patterns), command)

    def test_invalid_pattern_makes_everything_dangerous(self):
        poisoned = DangerousPatternSet([r"rm", r"([bad"])
        self.assertFalse(poisoned.ok)
        self.assertTrue(is_dangerous("ls -la", poisoned))
        self.assertTrue(is_dangerous("", poisoned))

    def test_matching_pattern_returns_first_hit(self):
        self.assertEqual(matching_pattern("rm -rf /", self.patterns), (0, r"rm\s+-rf\s+/"))
        self.assertEqual(matching_pattern("dd if=/dev/zero of=x", self.patterns), (2, r"dd\s+if=/dev/zero"))

    def test_matching_pattern_none_for_safe_or_poisoned(self):
        self.assertIsNone(matching_pattern("ls -la", self.patterns))
        self.assertIsNone(matching_pattern("ls -la", DangerousPatternSet([r"("])))

    def test_custom_patterns(self):
        patterns = DangerousPatternSet([r"^shutdown\b", r"reboot"])
        self.assertTrue(is_dangerous("shutdown now", patterns))
        self.assertEqual(matching_pattern("sudo reboot", patterns), (1, "reboot"))
        self.assertFalse(is_dangerous("rm -rf /", patterns))


if __name__ == "__main__":
    unittest.main()
