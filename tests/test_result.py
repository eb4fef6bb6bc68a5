import pytest

from inkroute.utils.result import Result


class TestResult:

    def test_ok_value(self):
        result = Result.ok(5)
        assert result.is_ok()
        assert not result.is_err()
        assert result.unwrap() == 5
        assert result.unwrap_or(0) == 5

    def test_err_value(self):
        error = ValueError('boom')
        result = Result.err(error)
        assert result.is_err()
        assert result.error is error
        assert result.unwrap_or(0) == 0

    def test_unwrap_err_raises_wrapped_error(self):
        with pytest.raises(ValueError, match='boom'):
            Result.err(ValueError('boom')).unwrap()

    def test_error_on_ok_raises(self):
        with pytest.raises(ValueError):
            _ = Result.ok(1).error

    def test_unwrap_or_else_receives_error(self):
        seen = []

        def fallback(error):
            seen.append(error)
            return 'fallback'

        assert Result.err(RuntimeError('down')).unwrap_or_else(fallback) == 'fallback'
        assert str(seen[0]) == 'down'

    def test_unwrap_or_else_not_called_when_ok(self):

        def fallback(error):
            raise AssertionError('fallback should not run')

        assert Result.ok('value').unwrap_or_else(fallback) == 'value'

    def test_map(self):
        assert Result.ok(2).map(lambda value: value * 10).unwrap() == 20
        error = KeyError('missing')
        mapped = Result.err(error).map(lambda value: value * 10)
        assert mapped.is_err()
        assert mapped.error is error
