import pytest

import calldata.config as config


@pytest.fixture
def wallets():
    return list(config.TOKEN_WALLETS)
