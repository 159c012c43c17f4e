"""Word and paragraph targets from example letters."""

from clrag.core.analysis.length_targets import LengthTargetDeriver, paragraph_count, round_half_up


def test_empty_input_is_none():
    deriver = LengthTargetDeriver()
    assert deriver.derive_targets([]) is None
    assert deriver.derive_targets(["", "   \n\n "]) is None


def test_short_text_range_is_not_inverted():
    targets = LengthTargetDeriver().derive_targets(["one two three"])
    assert targets.target_words == 3
    assert targets.target_paragraphs == 1
    assert targets.words_range == (50, 50)


def test_band_and_means():
    letter_a = " ".join(["word"] * 200) + "\n\n" + " ".join(["word"] * 100)
    letter_b = " ".join(["word"] * 300) + "\n\n\n" + "x\n\ny"
    targets = LengthTargetDeriver().derive_targets([letter_a, letter_b])

    assert targets.target_words == 301
    assert targets.target_paragraphs == 3  # (2 + 3) / 2 rounds half up
    assert targets.words_range == (256, 346)


def test_rounds_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(2.4) == 2


def test_paragraph_count_floor_and_splitting():
    assert paragraph_count("single line") == 1
    assert paragraph_count("a\nb") == 1
    assert paragraph_count("a\n\nb\n\n\n\nc") == 3
    assert paragraph_count("\n\n\n") == 1
