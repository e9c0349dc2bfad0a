# Creative analytics backend package
