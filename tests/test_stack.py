"""Tests for the return-address stack."""

import jax.numpy as jnp
from chip8vm import STACK_SIZE
from chip8vm.stack import StackState, push, pop


def test_push_then_pop_is_lifo():
    stack = StackState()
    stack, overflow = push(stack, 0x202)
    assert not overflow
    stack, overflow = push(stack, 0x40A)
    assert not overflow
    assert stack.pointer == 2

    stack, address, underflow = pop(stack)
    assert address == 0x40A
    assert not underflow
    stack, address, underflow = pop(stack)
    assert address == 0x202
    assert not underflow
    assert stack.pointer == 0


def test_push_masks_to_12_bits():
    stack, _ = push(StackState(), 0x1234)
    assert stack.data[0] == 0x234


def test_overflow_leaves_stack_unchanged():
    stack = StackState()
    for depth in range(STACK_SIZE):
        stack, overflow = push(stack, 0x200 + 2 * depth)
        assert not overflow

    full, overflow = push(stack, 0x300)

    assert overflow
    assert full.pointer == STACK_SIZE
    assert jnp.array_equal(full.data, stack.data)


def test_underflow_on_empty_stack():
    stack, address, underflow = pop(StackState())

    assert underflow
    assert address == 0
    assert stack.pointer == 0
