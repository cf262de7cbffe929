# Ensure src/ is importable for direct test execution without an editable install.
import pathlib
import sys

import pytest

root = pathlib.Path(__file__).resolve().parent.parent
src = root / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))


OLD_WEIGHTS = """
//! Autogenerated weights for `pallet_example`

#![cfg_attr(rustfmt, rustfmt_skip)]
#![allow(unused_parens)]

use frame_support::{traits::Get, weights::{Weight, constants::RocksDbWeight}};
use core::marker::PhantomData;

/// Weight functions needed for `pallet_example`.
pub trait WeightInfo {
	fn transfer() -> Weight;
	fn batch(c: u32, ) -> Weight;
	fn remark(b: u32, ) -> Weight;
	fn kill() -> Weight;
}

/// Weights for `pallet_example` using the Substrate node and recommended hardware.
pub struct SubstrateWeight<T>(PhantomData<T>);
impl<T: frame_system::Config> WeightInfo for SubstrateWeight<T> {
	/// Storage: `System::Account` (r:1 w:1)
	/// Proof: `System::Account` (`max_values`: None, `max_size`: Some(128), added: 2603, mode: `MaxEncodedLen`)
	fn transfer() -> Weight {
		// Proof Size summary in bytes:
		//  Measured:  `0`
		//  Estimated: `3593`
		// Minimum execution time: 37_000_000 picoseconds.
		Weight::from_parts(38_000_000, 3593)
			.saturating_add(T::DbWeight::get().reads(1_u64))
			.saturating_add(T::DbWeight::get().writes(1_u64))
	}
	/// The range of component `c` is `[0, 1000]`.
	fn batch(c: u32, ) -> Weight {
		Weight::from_parts(5_000_000, 0)
			// Standard Error: 2_000
			.saturating_add(Weight::from_parts(4_000_000, 0).saturating_mul(c.into()))
			.saturating_add(T::DbWeight::get().reads((1_u64).saturating_mul(c.into())))
			.saturating_add(Weight::from_parts(0, 2603).saturating_mul(c.into()))
	}
	/// The range of component `b` is `[0, 3932160]`.
	fn remark(b: u32, ) -> Weight {
		Weight::from_parts(2_000_000, 0)
			.saturating_add(Weight::from_parts(400, 0).saturating_mul(b.into()))
	}
	fn kill() -> Weight {
		Weight::from_parts(10_000_000, 0)
	}
}

// For backwards compatibility and tests.
impl WeightInfo for () {
	fn transfer() -> Weight {
		Weight::from_parts(38_000_000, 3593)
			.saturating_add(RocksDbWeight::get().reads(1_u64))
			.saturating_add(RocksDbWeight::get().writes(1_u64))
	}
}
"""

NEW_WEIGHTS = """
impl<T: frame_system::Config> pallet_example::WeightInfo for SubstrateWeight<T> {
	fn transfer() -> Weight {
		Weight::from_parts(38_100_000, 3593)
			.saturating_add(T::DbWeight::get().reads(1_u64))
			.saturating_add(T::DbWeight::get().writes(1_u64))
	}
	/// The range of component `c` is `[0, 1000]`.
	fn batch(c: u32, ) -> Weight {
		Weight::from_parts(5_000_000, 0)
			.saturating_add(Weight::from_parts(8_000_000, 0).saturating_mul(c.into()))
			.saturating_add(T::DbWeight::get().reads((1_u64).saturating_mul(c.into())))
	}
	/// The range of component `b` is `[0, 3932160]`.
	fn remark(b: u32, ) -> Weight {
		if b > 10 {
			Weight::from_parts(1, 0)
		} else {
			Weight::zero()
		}
	}
	fn create() -> Weight {
		Weight::from_parts(12_000_000, 0)
	}
}
"""

LEGACY_WEIGHTS = """
impl<T: frame_system::Config> WeightInfo for SubstrateWeight<T> {
	// Storage: Example Value (r:1 w:0)
	/// The range of component `r` is `[1, 50]`.
	fn set(r: u32, ) -> Weight {
		(32_778_000 as Weight)
			// Standard Error: 1_000
			.saturating_add((5_000 as Weight).saturating_mul(r as Weight))
			.saturating_add(T::DbWeight::get().reads(1 as Weight))
	}
}
"""


@pytest.fixture
def old_weights() -> str:
    return OLD_WEIGHTS


@pytest.fixture
def new_weights() -> str:
    return NEW_WEIGHTS


@pytest.fixture
def legacy_weights() -> str:
    return LEGACY_WEIGHTS
