# Copyright (C) 2025  Technische Universitaet Berlin
#
# This library is free software; you can redistribute it and/or
# modify it under the terms of the GNU Lesser General Public
# License as published by the Free Software Foundation; either
# version 3 of the License, or (at your option) any later version.
#
# This library is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU
# Lesser General Public License for more details.
#
# You should have received a copy of the GNU Lesser General Public
# License along with this library; if not, write to the Free Software
# Foundation, Inc., 51 Franklin Street, Fifth Floor, Boston, MA  02110-1301
# USA

"""False discovery rate and Q-values of target/decoy search results."""
import numpy as np


def fdr_and_q_values(decoy):
    """
    Calculate FDR and Q-value for results ordered from best to worst.

    The FDR at a rank is the number of decoys divided by the number of targets up to that
    rank (1 while there are no targets). The Q-value is the lowest FDR at that rank or any
    worse one.

    :param decoy: (array-like of bool) decoy flag of each result, best result first
    :return: (tuple of ndarray) fdr, q_value
    """
    decoy = np.asarray(decoy, dtype=bool)
    if decoy.size == 0:
        return np.empty(0), np.empty(0)

    reverse_count = np.cumsum(decoy)
    forward_count = np.cumsum(~decoy)

    fdr = np.ones(decoy.size)
    has_forward = forward_count > 0
    fdr[has_forward] = reverse_count[has_forward] / forward_count[has_forward]

    # running minimum from the worst result towards the best one, capped at 1
    q_value = np.minimum.accumulate(np.minimum(fdr, 1.0)[::-1])[::-1]
    return fdr, q_value


def compute_q_values(results):
    """
    Store FDR and Q-value on search results.

    :param results: (list of SearchResult) results ordered from best to worst; the decoy
        property decides whether a result counts as reverse hit
    """
    if len(results) == 0:
        return
    fdr, q_value = fdr_and_q_values([r.decoy for r in results])
    for result, result_fdr, result_q in zip(results, fdr, q_value):
        result.fdr = float(result_fdr)
        result.q_value = float(result_q)
