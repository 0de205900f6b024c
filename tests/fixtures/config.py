from rollup_stream.plugins import hypothetical


config = {
    "entry": "./entry.js",
    "plugins": [
        hypothetical({
            "./entry.js": 'import x from "./x.js"; console.log(x);',
            "./x.js": 'export default "Hello, World!";',
        }),
    ],
}
