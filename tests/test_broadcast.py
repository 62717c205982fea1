"""
Tests für die Broadcast-Regeln.

Elementweise Operationen müssen eine eindeutige Samplerate liefern.
"""

import logging

import pytest
import numpy as np

from samplebuf.core.broadcast import (
    broadcast,
    check_samplerates,
    find_buffer_type,
    find_samplerates,
    unwrap_operands,
    wrap_result,
)
from samplebuf.core.buffers import TimeBuffer, SpectrumBuffer
from samplebuf.core.errors import RateMismatchError, VariantMismatchError


class TestRateCollection:
    """Tests für das Einsammeln der Raten."""

    def test_nested_operands(self):
        """Verschachtelte Gruppen werden durchsucht, Duplikate bleiben."""
        a = TimeBuffer(np.zeros(4), 2.0)
        b = TimeBuffer(np.zeros(4), 2.0)
        c = TimeBuffer(np.zeros(4), 4.0)

        rates = find_samplerates([a, (b, 3.0, [c]), np.zeros(4)])

        assert rates == [2.0, 2.0, 4.0]

    def test_no_buffers(self):
        """Ohne Buffer keine Raten."""
        assert find_samplerates([1.0, np.zeros(3)]) == []

    def test_check_matching(self):
        """Gleiche Raten ergeben die gemeinsame Rate."""
        assert check_samplerates([44100.0, 44100.0]) == 44100.0

    def test_check_mismatch(self):
        """Abweichende Raten werden abgelehnt."""
        with pytest.raises(RateMismatchError, match="All samplerates"):
            check_samplerates([44100.0, 48000.0])

    def test_check_empty(self):
        """Mindestens ein Buffer ist erforderlich."""
        with pytest.raises(ValueError):
            check_samplerates([])

    def test_buffer_type(self):
        """Variante des Ausdrucks."""
        a = SpectrumBuffer(np.zeros(4), 1.0)

        assert find_buffer_type((2.0, a)) is SpectrumBuffer

    def test_mixed_variants(self):
        """Zeit- und Spektrum-Buffer gemischt ist ein Typfehler."""
        a = TimeBuffer(np.zeros(4), 1.0)
        b = SpectrumBuffer(np.zeros(4), 1.0)

        with pytest.raises(VariantMismatchError):
            find_buffer_type((a, b))
        with pytest.raises(TypeError):
            a + b


class TestUnwrapAndWrap:
    """Tests für Aus- und Einpacken."""

    def test_mono_becomes_column(self):
        """1D-Buffer wird neben 2D-Operanden zur Spalte."""
        a = TimeBuffer(np.arange(3.0), 1.0)
        b = np.zeros((3, 2))

        ua, ub = unwrap_operands((a, b))

        assert ua.shape == (3, 1)
        assert ub is b

    def test_mono_stays_vector(self):
        """Ohne 2D-Operanden bleibt 1D erhalten."""
        a = TimeBuffer(np.arange(3.0), 1.0)

        (ua, ) = unwrap_operands((a, ))

        assert ua.shape == (3,)

    def test_wrap_scalar(self):
        """0-d Ergebnisse bleiben Skalare."""
        assert wrap_result(np.float64(3.0), TimeBuffer, 1.0) == 3.0

    def test_wrap_array(self):
        """Arrays werden mit Rate verpackt."""
        result = wrap_result(np.ones(3), SpectrumBuffer, 0.5)

        assert isinstance(result, SpectrumBuffer)
        assert result.samplerate == 0.5


class TestOperators:
    """Tests für Operatoren und ufuncs."""

    def test_same_rate(self):
        """Gleiche Raten: Ergebnis trägt diese Rate."""
        a = TimeBuffer(np.array([1.0, 2.0, 3.0]), 44100)
        b = TimeBuffer(np.array([10.0, 20.0, 30.0]), 44100)

        result = a + b

        assert isinstance(result, TimeBuffer)
        assert result.samplerate == 44100
        np.testing.assert_array_equal(result.data, [11.0, 22.0, 33.0])

    def test_different_rate(self):
        """Unterschiedliche Raten: RateMismatchError."""
        a = TimeBuffer(np.zeros(3), 44100)
        b = TimeBuffer(np.zeros(3), 48000)

        with pytest.raises(RateMismatchError, match="must match"):
            a + b
        with pytest.raises(RateMismatchError):
            np.multiply(a, b)
        with pytest.raises(RateMismatchError):
            broadcast(np.add, a, b)

    def test_scalar_operands(self):
        """Skalare und rohe Arrays übernehmen die Buffer-Rate."""
        a = TimeBuffer(np.array([1.0, 2.0]), 8.0)

        doubled = a * 2
        shifted = 1 - a
        added = a + np.array([1.0, 1.0])

        for result in (doubled, shifted, added):
            assert isinstance(result, TimeBuffer)
            assert result.samplerate == 8.0
        np.testing.assert_array_equal(shifted.data, [0.0, -1.0])

    def test_unary_ufunc(self):
        """np.sin liefert einen Buffer."""
        a = SpectrumBuffer(np.zeros(4), 0.25)

        result = np.sin(a)

        assert isinstance(result, SpectrumBuffer)
        assert result.samplerate == 0.25

    def test_mono_plus_stereo(self):
        """Mono wird framweise auf alle Kanäle angewendet."""
        mono = TimeBuffer(np.array([1.0, 2.0, 3.0]), 10.0)
        stereo = TimeBuffer(np.array([[1.0, 10.0], [2.0, 20.0], [3.0, 30.0]]), 10.0)

        result = mono + stereo

        assert result.shape == (3, 2)
        np.testing.assert_array_equal(result.data, [[2.0, 11.0], [4.0, 22.0], [6.0, 33.0]])

    def test_comparison_is_elementwise(self):
        """Vergleichsoperatoren liefern Bool-Buffer."""
        a = TimeBuffer(np.array([0.0, 2.0]), 1.0)

        result = a > 1

        assert isinstance(result, TimeBuffer)
        assert result.dtype == bool
        np.testing.assert_array_equal(result.data, [False, True])

    def test_result_is_new_array(self):
        """Eingaben bleiben unverändert."""
        a = TimeBuffer(np.ones(3), 1.0)

        result = a * 3
        result[0] = 0.0

        assert a[0] == 1.0

    def test_tuple_result(self):
        """divmod liefert zwei Buffer."""
        a = TimeBuffer(np.array([5, 7]), 1.0)

        q, r = np.divmod(a, 2)

        assert isinstance(q, TimeBuffer) and isinstance(r, TimeBuffer)
        np.testing.assert_array_equal(r.data, [1, 1])

    def test_out_buffer(self):
        """out= schreibt in den Ziel-Buffer."""
        a = TimeBuffer(np.array([1.0, 2.0]), 4.0)
        dest = TimeBuffer(np.zeros(2), 4.0)

        result = np.add(a, a, out=dest)

        assert result is dest
        np.testing.assert_array_equal(dest.data, [2.0, 4.0])

    def test_out_buffer_rate_checked(self):
        """Auch der Ziel-Buffer muss die Rate teilen."""
        a = TimeBuffer(np.array([1.0, 2.0]), 4.0)
        dest = TimeBuffer(np.zeros(2), 8.0)

        with pytest.raises(RateMismatchError):
            np.add(a, a, out=dest)

    def test_reduction_returns_plain(self):
        """Reduktionen verlieren die Frame-Achse."""
        a = TimeBuffer(np.array([1.0, 2.0, 3.0]), 1.0)

        assert np.add.reduce(a) == 6.0


class TestBroadcastFunction:
    """Tests für broadcast() mit beliebigen Kernen."""

    def test_custom_kernel(self):
        """Beliebige elementweise Funktion."""
        a = TimeBuffer(np.array([1.0, 2.0]), 2.0)
        b = TimeBuffer(np.array([3.0, 4.0]), 2.0)

        result = broadcast(lambda x, y: 0.5 * (x + y), a, b)

        assert isinstance(result, TimeBuffer)
        assert result.samplerate == 2.0
        np.testing.assert_array_equal(result.data, [2.0, 3.0])

    def test_kernel_kwargs(self):
        """Schlüsselwortargumente werden durchgereicht."""
        a = TimeBuffer(np.array([1.26, -0.74]), 2.0)

        result = broadcast(np.round, a, decimals=1)

        assert isinstance(result, TimeBuffer)
        np.testing.assert_allclose(result.data, [1.3, -0.7])

    def test_identity_kernel_does_not_alias(self):
        """Gibt der Kern seine Eingabe zurück, entsteht trotzdem eine Kopie."""
        a = TimeBuffer(np.array([1.0, 2.0]), 2.0)

        result = broadcast(lambda x: x, a)
        result[0] = 5.0

        assert a[0] == 1.0
        assert not np.shares_memory(result.data, a.data)

    def test_view_kernel_does_not_alias(self):
        """Auch Views der Eingabe werden kopiert."""
        mono = TimeBuffer(np.arange(3.0), 2.0)
        stereo = TimeBuffer(np.zeros((3, 2)), 2.0)

        result = broadcast(lambda x, y: x, mono, stereo)

        assert result.shape == (3, 1)
        assert not np.shares_memory(result.data, mono.data)

    def test_nested_group_rates(self):
        """Buffer in verschachtelten Gruppen zählen mit."""
        a = TimeBuffer(np.ones(2), 2.0)
        b = TimeBuffer(np.ones(2), 3.0)

        with pytest.raises(RateMismatchError):
            broadcast(lambda x, group: x + sum(group), a, [b])

    def test_debug_logging(self, caplog):
        """Die vereinbarte Rate wird protokolliert."""
        caplog.set_level(logging.DEBUG, logger="samplebuf.core.broadcast")
        a = TimeBuffer(np.ones(2), 2.0)

        a + a

        assert "rate 2.0" in caplog.text
