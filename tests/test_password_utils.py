import pytest

from shopcart.core.exceptions import HashError
from shopcart.utils import password_utils


def test_hash_is_salted_and_verifies():
    first = password_utils.get_password_hash("s3cret-pass")
    second = password_utils.get_password_hash("s3cret-pass")

    assert first != "s3cret-pass"
    assert first != second
    assert password_utils.verify_password("s3cret-pass", first)
    assert password_utils.verify_password("s3cret-pass", second)


def test_verify_rejects_wrong_password():
    hashed = password_utils.get_password_hash("s3cret-pass")
    assert not password_utils.verify_password("other-pass", hashed)


@pytest.mark.parametrize("stored", ["", None, "not-a-bcrypt-hash"])
def test_verify_treats_missing_or_unknown_hash_as_mismatch(stored):
    assert password_utils.verify_password("s3cret-pass", stored) is False


def test_hash_failure_raises_hash_error(mocker):
    mocker.patch.object(password_utils.bcrypt_context, "hash", side_effect=RuntimeError("backend gone"))
    with pytest.raises(HashError):
        password_utils.get_password_hash("s3cret-pass")
