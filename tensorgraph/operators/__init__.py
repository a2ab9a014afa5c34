"""Concat, element-wise, matmul, transpose and unary operators for computation graphs."""