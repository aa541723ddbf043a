from deccalc.parser import ParserError, format_tree, parse
from deccalc.runtime import CalcRuntimeError, EvalContext, evaluate_expression
from deccalc.tokenizer import TokenizerError, tokenize
from deccalc.value import format_decimal

context = EvalContext()

for code in [
    "5",
    "-1",
    "1 + 1",
    "-1 + 1",
    "1 + -1",
    "4 + 6 * 3",
    "(4 + 6)",
    "3 * (4+6)",
    "0.1 + 0.2",
    ".125 * 8",
    "7/6/2000",
    "1 / 3",
    "10 / 5/ 2",
    "devil = 666",
    "devil - 666",
    "my-var = (1 + 14 * (54 * 54))",
    "a = b = 10",
    "(1 + 2) * 3",
    "1 / 0",
    "unknown",
]:
    print("=" * 10)
    print(f"code: {code!r}")
    try:
        tokens = tokenize(code)
    except TokenizerError as e:
        print(e)
        continue

    print(f"tokens: {' '.join(str(t) for t in tokens)}")

    try:
        tree = parse(tokens)
    except ParserError as e:
        print(e)
        continue
    print(f"ast:\n{format_tree(tree, indent=1)}")

    try:
        result = evaluate_expression(tree, context)
    except CalcRuntimeError as e:
        print(e)
        continue
    print(f"result: {format_decimal(result)}")
    print(f"variables: {context.variables}")
