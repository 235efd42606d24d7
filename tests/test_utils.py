# -*- coding: utf-8 -*-
import tickta as ta

A = [1, 2, 3, 2, 1]
B = [2, 2, 2, 2, 2]


def test_cross_up():
    assert ta.cross_up(A, B) == [False, False, True, False, False]


def test_cross_down():
    assert ta.cross_down(A, B) == [False, False, False, False, True]


def test_cross_over():
    assert ta.cross_over(A, B) == [False, False, True, False, True]


def test_first_bar_never_crosses():
    s = ta.Stream("cross_over")
    assert s.advance((3, 1)) is False
    assert s.advance((0, 1)) is True
