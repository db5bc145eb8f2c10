"""
Property-based tests for calldata.abi

Checks that encoding is deterministic, that decode() inverts encode() for
generated arguments, and that the argument block matches eth_abi.
"""

import pytest
from eth_abi import encode as abi_encode
from hypothesis import given, settings, strategies as st
from web3 import Web3

import calldata.config as config
from calldata.abi import Signature, decode, encode, parse_type, signature_from_abi
from calldata.errors import IntegerOverflow

MINT = signature_from_abi(config.MINT_ABI, "mint")
INITIALIZE = signature_from_abi(config.INITIALIZE_ABI, "initialize")
PROXY_CONSTRUCTOR = signature_from_abi(config.PROXY_CONSTRUCTOR_ABI)

# ============================================================================
# STRATEGIES
# ============================================================================

addresses = st.binary(min_size=20, max_size=20).map(lambda raw: Web3.to_checksum_address("0x" + raw.hex()))

uint256_values = st.integers(min_value=0, max_value=2**256 - 1)

wallet_triples = st.lists(addresses, min_size=3, max_size=3)

payloads = st.binary(max_size=256)


@st.composite
def sized_uint(draw):
    """Generate (bits, value) with value in range for uint<bits>."""
    bits = draw(st.sampled_from(range(8, 257, 8)))
    value = draw(st.integers(min_value=0, max_value=2**bits - 1))
    return bits, value


# ============================================================================
# ROUND TRIP
# ============================================================================


class TestRoundTripProperties:
    @given(address=addresses, amount=uint256_values)
    @settings(max_examples=200)
    def test_mint_round_trip(self, address, amount):
        assert decode(MINT, encode(MINT, [address, amount])) == (address, amount)

    @given(owner=addresses, wallets=wallet_triples)
    def test_initialize_round_trip(self, owner, wallets):
        assert decode(INITIALIZE, encode(INITIALIZE, [owner, wallets])) == (owner, tuple(wallets))

    @given(implementation=addresses, admin=addresses, data=payloads)
    def test_proxy_constructor_round_trip(self, implementation, admin, data):
        args = (implementation, admin, data)
        assert decode(PROXY_CONSTRUCTOR, encode(PROXY_CONSTRUCTOR, args)) == args

    @given(sized_uint())
    def test_uint_widths_round_trip(self, sized):
        bits, value = sized
        signature = Signature.parse(f"(uint{bits})")
        assert decode(signature, encode(signature, [value])) == (value,)


# ============================================================================
# DETERMINISM AND LAYOUT
# ============================================================================


class TestEncodingProperties:
    @given(owner=addresses, wallets=wallet_triples)
    def test_deterministic(self, owner, wallets):
        assert encode(INITIALIZE, [owner, wallets]) == encode(INITIALIZE, [owner, list(wallets)])

    @given(implementation=addresses, admin=addresses, data=payloads)
    def test_tail_layout(self, implementation, admin, data):
        encoded = encode(PROXY_CONSTRUCTOR, [implementation, admin, data])
        assert len(encoded) % 32 == 0
        assert int.from_bytes(encoded[64:96], "big") == 96
        assert int.from_bytes(encoded[96:128], "big") == len(data)
        assert encoded[128 : 128 + len(data)] == data
        assert not any(encoded[128 + len(data) :])

    @given(address=addresses, amount=uint256_values)
    def test_selector_prefix(self, address, amount):
        encoded = encode(MINT, [address, amount])
        assert encoded[:4] == bytes(Web3.keccak(text="mint(address,uint256)")[:4])

    @given(value=st.integers(min_value=2**256, max_value=2**300))
    def test_out_of_range_always_rejected(self, value):
        with pytest.raises(IntegerOverflow):
            encode(MINT, [config.OWNER_ADDRESS, value])

    @given(value=st.integers(max_value=-1))
    def test_negative_always_rejected(self, value):
        with pytest.raises(IntegerOverflow):
            encode(MINT, [config.OWNER_ADDRESS, value])


# ============================================================================
# REFERENCE ENCODER AGREEMENT
# ============================================================================


class TestMatchesEthAbi:
    @given(address=addresses, amount=uint256_values)
    def test_mint_arguments(self, address, amount):
        assert encode(MINT, [address, amount])[4:] == abi_encode(["address", "uint256"], [address, amount])

    @given(owner=addresses, wallets=wallet_triples)
    def test_initialize_arguments(self, owner, wallets):
        assert encode(INITIALIZE, [owner, wallets])[4:] == abi_encode(["address", "address[3]"], [owner, wallets])

    @given(implementation=addresses, admin=addresses, data=payloads)
    def test_proxy_constructor_arguments(self, implementation, admin, data):
        args = [implementation, admin, data]
        assert encode(PROXY_CONSTRUCTOR, args) == abi_encode(["address", "address", "bytes"], args)

    @given(sized_uint())
    def test_uint_widths(self, sized):
        bits, value = sized
        assert encode(f"(uint{bits})", [value]) == abi_encode([parse_type(f"uint{bits}").canonical], [value])
