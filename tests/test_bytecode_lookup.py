import pytest
from jvm_bytecode.analysis import bytecode_lookup
from jvm_bytecode.analysis.bytecode_lookup import bytecode_for_member, instructions_for_member, match_member
from jvm_bytecode.core.opcodes import Opcode

BYTECODE_CACHE = {
    "public com.example.Counter()": "0: aload_0\n1: invokespecial #1 // Method java/lang/Object.\"<init>\":()V\n4: return",
    "public int increment(int)": "0: iload_1\n1: iconst_1\n2: iadd\n3: ireturn",
    "public java.util.List names()": "0: getstatic #2 // Field names:Ljava/util/List;\n3: areturn",
}


@pytest.fixture
def cache():
    return dict(BYTECODE_CACHE)


def test_exact_key(cache):
    assert bytecode_for_member("public int increment(int)", cache) == BYTECODE_CACHE["public int increment(int)"]


def test_falls_back_to_best_match(cache):
    bytecode = bytecode_for_member("public java.util.List<java.lang.String> names()", cache)

    assert bytecode == BYTECODE_CACHE["public java.util.List names()"]


def test_unavailable_bytecode(cache):
    assert bytecode_for_member("public void reset()", cache) is None


def test_cache_is_not_modified(cache):
    bytecode_for_member("public Counter()", cache)
    bytecode_for_member("public void reset()", cache)

    assert cache == BYTECODE_CACHE


def test_instructions_for_member(cache):
    result = instructions_for_member("public Counter()", cache)

    assert [i.opcode for i in result] == [Opcode.ALOAD_0, Opcode.INVOKESPECIAL, Opcode.RETURN]
    assert result[1].comment == 'Method java/lang/Object."<init>":()V'


def test_instructions_for_missing_member(cache):
    result = instructions_for_member("public void reset()", cache)

    assert len(result) == 0
    assert result.diagnostics == ()


def test_match_member_returns_matched_key(cache):
    assert match_member("public int increment(int)", cache) == ("public int increment(int)", BYTECODE_CACHE["public int increment(int)"])
    assert match_member("public java.util.List<java.lang.String> names()", cache) == (
        "public java.util.List names()",
        BYTECODE_CACHE["public java.util.List names()"],
    )
    assert match_member("public void reset()", cache) is None


def test_exact_key_skips_matcher(cache, monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("matcher should not run for an exact key")

    monkeypatch.setattr(bytecode_lookup, "find_best_match", fail)

    assert match_member("public int increment(int)", cache)[0] == "public int increment(int)"
